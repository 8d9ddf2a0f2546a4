"""Tests for secondary children API endpoints."""
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from models.node import Node
from models.user import User
from services import node_service


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
async def p0(db_session: AsyncSession, root: Node, test_user: User) -> Node:
    """Primary parent of the test documents."""
    return await node_service.create_node(
        db_session, 'P0', parent=root, node_type=node_service.FOLDER_TYPE,
        created_by_id=test_user.id,
    )


@pytest.fixture
async def p1(db_session: AsyncSession, root: Node, test_user: User) -> Node:
    """Parent that receives secondary children."""
    return await node_service.create_node(
        db_session, 'P1', parent=root, node_type=node_service.FOLDER_TYPE,
        created_by_id=test_user.id,
    )


@pytest.fixture
async def c1(db_session: AsyncSession, p0: Node, test_user: User) -> Node:
    """Document whose primary parent is P0."""
    return await node_service.create_node(
        db_session, 'C1.txt', parent=p0, created_by_id=test_user.id,
    )


@pytest.fixture
async def c2(db_session: AsyncSession, p0: Node, test_user: User) -> Node:
    """Second document whose primary parent is P0."""
    return await node_service.create_node(
        db_session, 'C2.txt', parent=p0, created_by_id=test_user.id,
    )


def _url(parent_id: object, child_id: object | None = None) -> str:
    url = f'/nodes/{parent_id}/secondary-children'
    return url if child_id is None else f'{url}/{child_id}'


async def _link(client: AsyncClient, parent: Node, child: Node, assoc_type: str = 'cm:contains') -> None:
    response = await client.post(
        _url(parent.id), json=[{'childId': str(child.id), 'assocType': assoc_type}],
    )
    assert response.status_code == 201


# =============================================================================
# POST /nodes/{parent_id}/secondary-children - Create
# =============================================================================


async def test__api_create__list_echoes_input(client: AsyncClient, p1: Node, c1: Node) -> None:
    """Create with a list body returns the accepted list."""
    response = await client.post(
        _url(p1.id), json=[{'childId': str(c1.id), 'assocType': 'cm:contains'}],
    )
    assert response.status_code == 201
    assert response.json() == [
        {'child_id': str(c1.id), 'assoc_type': 'cm:contains', 'is_primary': False},
    ]


async def test__api_create__single_object_echoes_object(
    client: AsyncClient, p1: Node, c1: Node,
) -> None:
    """Create with a single object body returns a single object."""
    response = await client.post(
        _url(p1.id), json={'child_id': str(c1.id), 'assoc_type': 'sys:children'},
    )
    assert response.status_code == 201
    assert response.json() == {
        'child_id': str(c1.id), 'assoc_type': 'sys:children', 'is_primary': False,
    }


async def test__api_create__duplicate_returns_409(client: AsyncClient, p1: Node, c1: Node) -> None:
    """Creating the same association twice returns 409 with an error code."""
    await _link(client, p1, c1)

    response = await client.post(
        _url(p1.id), json=[{'childId': str(c1.id), 'assocType': 'cm:contains'}],
    )
    assert response.status_code == 409
    detail = response.json()['detail']
    assert detail['error_code'] == 'CONSTRAINT_VIOLATED'
    assert 'already exists' in detail['message']

    listing = await client.get(_url(p1.id))
    assert listing.json()['total'] == 1


async def test__api_create__malformed_type_returns_400(
    client: AsyncClient, p1: Node, c1: Node, c2: Node,
) -> None:
    """A malformed association type anywhere in the batch fails with no changes."""
    response = await client.post(_url(p1.id), json=[
        {'childId': str(c1.id), 'assocType': 'cm:contains'},
        {'childId': str(c2.id), 'assocType': 'contains'},
    ])
    assert response.status_code == 400
    assert 'Invalid assocType' in response.json()['detail']

    listing = await client.get(_url(p1.id))
    assert listing.json()['total'] == 0


async def test__api_create__unknown_type_returns_400(
    client: AsyncClient, p1: Node, c1: Node,
) -> None:
    response = await client.post(
        _url(p1.id), json={'childId': str(c1.id), 'assocType': 'cm:nope'},
    )
    assert response.status_code == 400
    assert 'Unknown assocType' in response.json()['detail']


async def test__api_create__missing_type_returns_400(
    client: AsyncClient, p1: Node, c1: Node,
) -> None:
    response = await client.post(_url(p1.id), json={'childId': str(c1.id)})
    assert response.status_code == 400
    assert 'Missing assocType' in response.json()['detail']


async def test__api_create__missing_child_id_returns_422(client: AsyncClient, p1: Node) -> None:
    response = await client.post(_url(p1.id), json={'assocType': 'cm:contains'})
    assert response.status_code == 422


async def test__api_create__unknown_parent_returns_404(client: AsyncClient, c1: Node) -> None:
    response = await client.post(
        _url(uuid4()), json={'childId': str(c1.id), 'assocType': 'cm:contains'},
    )
    assert response.status_code == 404


async def test__api_create__unknown_child_returns_404(client: AsyncClient, p1: Node) -> None:
    response = await client.post(
        _url(p1.id), json={'childId': 'no-such-node', 'assocType': 'cm:contains'},
    )
    assert response.status_code == 404
    assert 'no-such-node' in response.json()['detail']


# =============================================================================
# GET /nodes/{parent_id}/secondary-children - List
# =============================================================================


async def test__api_list__scenario_create_then_list(
    client: AsyncClient, p0: Node, p1: Node, c1: Node,
) -> None:
    """C1 lives under P0; after filing it under P1 it is listed once as secondary."""
    await _link(client, p1, c1)

    response = await client.get(_url(p1.id))
    assert response.status_code == 200
    data = response.json()
    assert data['total'] == 1
    assert data['offset'] == 0
    assert data['has_more'] is False
    assert len(data['items']) == 1

    item = data['items'][0]
    assert item['id'] == str(c1.id)
    assert item['name'] == 'C1.txt'
    assert item['parent_id'] == str(p0.id)
    assert item['association'] == {
        'child_id': str(c1.id), 'assoc_type': 'cm:contains', 'is_primary': False,
    }
    assert item['created_by_user']['display_name'] == 'Jane Doe'
    assert 'properties' in item
    assert item['properties'] is None


async def test__api_list__only_primary_children_is_empty(
    client: AsyncClient, p0: Node, c1: Node, c2: Node,  # noqa: ARG001
) -> None:
    response = await client.get(_url(p0.id))
    assert response.status_code == 200
    assert response.json()['items'] == []
    assert response.json()['total'] == 0


async def test__api_list__where_filter(
    client: AsyncClient, p1: Node, c1: Node, c2: Node,
) -> None:
    await _link(client, p1, c1, 'cm:contains')
    await _link(client, p1, c2, 'sys:children')

    response = await client.get(
        _url(p1.id), params={'where': "(assocType='sys:children')"},
    )
    assert response.status_code == 200
    data = response.json()
    assert [i['id'] for i in data['items']] == [str(c2.id)]
    assert data['total'] == 1


async def test__api_list__where_filter_excludes_primary_children(
    client: AsyncClient, db_session: AsyncSession, p1: Node, c1: Node,
) -> None:
    own = await node_service.create_node(db_session, 'own.txt', parent=p1)
    await _link(client, p1, c1, 'cm:contains')

    response = await client.get(
        _url(p1.id), params={'where': "(assocType='cm:contains')"},
    )
    assert response.status_code == 200
    data = response.json()
    assert [i['id'] for i in data['items']] == [str(c1.id)]
    assert str(own.id) not in [i['id'] for i in data['items']]
    assert data['total'] == 1


async def test__api_list__malformed_where_returns_400(client: AsyncClient, p1: Node) -> None:
    response = await client.get(_url(p1.id), params={'where': 'assocType=cm:contains'})
    assert response.status_code == 400


async def test__api_list__unknown_where_type_returns_400(client: AsyncClient, p1: Node) -> None:
    response = await client.get(_url(p1.id), params={'where': "(assocType='xx:contains')"})
    assert response.status_code == 400


async def test__api_list__include(
    client: AsyncClient, db_session: AsyncSession, root: Node, p0: Node, p1: Node,
) -> None:
    """include=properties,path expands each listed node."""
    doc = await node_service.create_node(
        db_session, 'plan.md', parent=p0, properties={'title': 'Plan'},
    )
    await _link(client, p1, doc)

    response = await client.get(_url(p1.id), params={'include': 'properties,path'})
    assert response.status_code == 200
    item = response.json()['items'][0]
    assert item['properties'] == {'title': 'Plan'}
    assert item['path']['name'] == '/Company Home/P0'
    assert [e['id'] for e in item['path']['elements']] == [str(root.id), str(p0.id)]


async def test__api_list__unknown_include_returns_400(client: AsyncClient, p1: Node) -> None:
    response = await client.get(_url(p1.id), params={'include': 'aspectNames'})
    assert response.status_code == 400


async def test__api_list__paging(
    client: AsyncClient, db_session: AsyncSession, p0: Node, p1: Node,
) -> None:
    children = [
        await node_service.create_node(db_session, f'doc-{i}.txt', parent=p0)
        for i in range(5)
    ]
    response = await client.post(_url(p1.id), json=[
        {'childId': str(c.id), 'assocType': 'cm:contains'} for c in children
    ])
    assert response.status_code == 201

    response = await client.get(_url(p1.id), params={'offset': 1, 'limit': 2})
    data = response.json()
    assert [i['name'] for i in data['items']] == ['doc-1.txt', 'doc-2.txt']
    assert data['total'] == 5
    assert data['limit'] == 2
    assert data['has_more'] is True

    response = await client.get(_url(p1.id), params={'offset': 4, 'limit': 2})
    data = response.json()
    assert [i['name'] for i in data['items']] == ['doc-4.txt']
    assert data['has_more'] is False


async def test__api_list__invalid_paging_returns_422(client: AsyncClient, p1: Node) -> None:
    response = await client.get(_url(p1.id), params={'offset': -1})
    assert response.status_code == 422
    response = await client.get(_url(p1.id), params={'limit': 0})
    assert response.status_code == 422


async def test__api_list__root_alias(client: AsyncClient, root: Node, c1: Node) -> None:
    await _link(client, root, c1)
    response = await client.get(_url('-root-'))
    assert response.status_code == 200
    assert [i['id'] for i in response.json()['items']] == [str(c1.id)]


async def test__api_list__unknown_parent_returns_404(client: AsyncClient) -> None:
    response = await client.get(_url(uuid4()))
    assert response.status_code == 404


# =============================================================================
# DELETE /nodes/{parent_id}/secondary-children/{child_id} - Delete
# =============================================================================


async def test__api_delete__with_type(client: AsyncClient, p1: Node, c1: Node, c2: Node) -> None:
    await _link(client, p1, c1)
    await _link(client, p1, c2)

    response = await client.delete(_url(p1.id, c1.id), params={'assocType': 'cm:contains'})
    assert response.status_code == 204
    assert response.content == b''

    listing = await client.get(_url(p1.id))
    assert [i['id'] for i in listing.json()['items']] == [str(c2.id)]


async def test__api_delete__without_type_removes_all(
    client: AsyncClient, p1: Node, c1: Node,
) -> None:
    await _link(client, p1, c1, 'cm:contains')
    await _link(client, p1, c1, 'sys:children')

    response = await client.delete(_url(p1.id, c1.id))
    assert response.status_code == 204

    listing = await client.get(_url(p1.id))
    assert listing.json()['total'] == 0


async def test__api_delete__primary_with_matching_type_returns_400(
    client: AsyncClient, p0: Node, c1: Node,
) -> None:
    response = await client.delete(_url(p0.id, c1.id), params={'assocType': 'cm:contains'})
    assert response.status_code == 400
    assert 'primary' in response.json()['detail']


async def test__api_delete__primary_without_type_returns_404(
    client: AsyncClient, p0: Node, c1: Node,
) -> None:
    response = await client.delete(_url(p0.id, c1.id))
    assert response.status_code == 404


async def test__api_delete__primary_with_other_type_returns_404(
    client: AsyncClient, p0: Node, c1: Node,
) -> None:
    response = await client.delete(_url(p0.id, c1.id), params={'assocType': 'sys:children'})
    assert response.status_code == 404


async def test__api_delete__malformed_type_returns_400(
    client: AsyncClient, p1: Node, c1: Node,
) -> None:
    await _link(client, p1, c1)
    response = await client.delete(_url(p1.id, c1.id), params={'assocType': 'nope'})
    assert response.status_code == 400


async def test__api_delete__unknown_nodes_return_404(client: AsyncClient, p1: Node, c1: Node) -> None:
    response = await client.delete(_url(uuid4(), c1.id))
    assert response.status_code == 404
    response = await client.delete(_url(p1.id, uuid4()))
    assert response.status_code == 404
