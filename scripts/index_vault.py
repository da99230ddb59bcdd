"""Script to bring the vault index up to date from the command line."""

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from vaultrag.infrastructure.config.settings import get_settings  # noqa: E402
from vaultrag.infrastructure.database.session import create_tables  # noqa: E402
from vaultrag.infrastructure.embedding import create_embedding_model  # noqa: E402
from vaultrag.infrastructure.logging import configure_logging, get_logger  # noqa: E402
from vaultrag.infrastructure.vault import FileSystemVault  # noqa: E402
from vaultrag.modules.retrieval import RAGEngine, RetrievalOptions  # noqa: E402
from vaultrag.modules.vector import IndexingConfig, IndexProgress, IndexRunStatus, VectorManager, VectorRepository  # noqa: E402

logger = get_logger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Index the markdown files of a vault.")
    parser.add_argument("--vault", help="Vault root directory (defaults to VAULT_PATH)")
    parser.add_argument("--reindex-all", action="store_true", help="Delete stored vectors and index every file")
    return parser.parse_args()


async def main() -> None:
    args = parse_args()
    settings = get_settings()
    configure_logging()

    await create_tables()

    vault = FileSystemVault(args.vault or settings.VAULT_PATH)
    manager = VectorManager(VectorRepository(), vault, config=IndexingConfig.from_settings(settings))
    engine = RAGEngine(vault, manager, create_embedding_model(settings), RetrievalOptions.from_settings(settings))

    def report(progress: IndexProgress) -> None:
        logger.info(f"Indexed {progress.completed_chunks}/{progress.total_chunks} chunks")

    result = await manager.update_vault_index(
        engine.embedding_model,
        engine.index_update_options(reindex_all=args.reindex_all),
        on_progress=report,
    )
    logger.info(f"Indexing finished: {result.status.value}, {len(result.indexed_files)} files")

    if result.status not in (IndexRunStatus.COMPLETED, IndexRunStatus.UP_TO_DATE):
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
