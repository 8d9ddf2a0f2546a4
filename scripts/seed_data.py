"""Seed script to populate a local dev database with a small node tree.

Creates a root folder, a few folders and documents under their primary
parents, and files some documents into a second folder as secondary children.

Usage:
    PYTHONPATH=src python scripts/seed_data.py populate
    PYTHONPATH=src python scripts/seed_data.py populate --force
    PYTHONPATH=src python scripts/seed_data.py clear
"""

import argparse
import asyncio

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.config import get_settings
from core.qname import CONTENT_MODEL_URI, QName, create_valid_local_name
from models import ChildAssociation, Node, User
from services import node_service

DEV_USERNAME = 'admin'

# folder name -> document names filed under it as primary children
FOLDERS = {
    'Projects': ['roadmap.md', 'budget.xlsx', 'kickoff-notes.txt'],
    'Marketing': ['brand-guide.pdf', 'launch-plan.docx'],
    'Shared': [],
}

# (document, folder it is additionally filed under)
SECONDARY_FILINGS = [
    ('roadmap.md', 'Shared'),
    ('launch-plan.docx', 'Shared'),
    ('brand-guide.pdf', 'Projects'),
]


async def get_or_create_dev_user(session: AsyncSession) -> User:
    """Get or create the dev user that owns seeded nodes."""
    result = await session.execute(select(User).where(User.username == DEV_USERNAME))
    user = result.scalar_one_or_none()
    if user is None:
        user = User(username=DEV_USERNAME, first_name='Administrator', email='admin@localhost')
        session.add(user)
        await session.flush()
        print(f'  Created dev user: {user.id}')
    else:
        print(f'  Found dev user: {user.id}')
    return user


async def create_tree(session: AsyncSession, user: User) -> None:
    """Create the root, folders, documents and secondary filings."""
    root = await node_service.create_node(
        session,
        'Company Home',
        node_type=node_service.FOLDER_TYPE,
        is_root=True,
        created_by_id=user.id,
    )
    folders: dict[str, Node] = {}
    documents: dict[str, Node] = {}
    for folder_name, doc_names in FOLDERS.items():
        folder = await node_service.create_node(
            session,
            folder_name,
            parent=root,
            node_type=node_service.FOLDER_TYPE,
            created_by_id=user.id,
        )
        folders[folder_name] = folder
        for doc_name in doc_names:
            documents[doc_name] = await node_service.create_node(
                session,
                doc_name,
                parent=folder,
                properties={'title': doc_name.rsplit('.', 1)[0]},
                created_by_id=user.id,
            )
    print(f'  Created {len(folders)} folders and {len(documents)} documents')

    for doc_name, folder_name in SECONDARY_FILINGS:
        doc = documents[doc_name]
        await node_service.add_child(
            session,
            folders[folder_name],
            doc,
            node_service.CONTAINS_ASSOC_TYPE,
            QName(CONTENT_MODEL_URI, create_valid_local_name(doc.name)),
        )
    print(f'  Created {len(SECONDARY_FILINGS)} secondary children')
    print(f'  Root node: {root.id}')


async def clear_data(session: AsyncSession) -> None:
    """Remove all nodes and associations."""
    assoc_count = (await session.execute(
        select(func.count()).select_from(ChildAssociation)
    )).scalar()
    node_count = (await session.execute(
        select(func.count()).select_from(Node)
    )).scalar()

    await session.execute(delete(ChildAssociation))
    await session.execute(delete(Node))
    await session.flush()

    print(f'  Deleted {node_count} nodes, {assoc_count} associations')
    print('Clear complete.')


async def populate(force: bool = False) -> None:
    """Populate the database with seed data."""
    settings = get_settings()
    engine = create_async_engine(settings.database_url, echo=False)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        try:
            if await node_service.get_root_node(session) is not None:
                if not force:
                    print('Node tree already exists. Use --force to clear and re-seed.')
                    return
                print('Existing data found, clearing first (--force)...')
                await clear_data(session)

            print('Populating seed data...')
            user = await get_or_create_dev_user(session)
            await create_tree(session, user)
            await session.commit()
            print('Seed data created successfully.')
        except Exception:
            await session.rollback()
            raise
        finally:
            await engine.dispose()


async def clear() -> None:
    """Clear all nodes."""
    settings = get_settings()
    engine = create_async_engine(settings.database_url, echo=False)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        try:
            await clear_data(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await engine.dispose()


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description='Seed the dev database with a node tree.')
    subparsers = parser.add_subparsers(dest='command', required=True)

    populate_parser = subparsers.add_parser('populate', help='Populate database with test data')
    populate_parser.add_argument(
        '--force', action='store_true',
        help='Clear existing data before populating',
    )

    subparsers.add_parser('clear', help='Remove all nodes and associations')

    args = parser.parse_args()

    if args.command == 'populate':
        asyncio.run(populate(force=args.force))
    elif args.command == 'clear':
        asyncio.run(clear())


if __name__ == '__main__':
    main()
