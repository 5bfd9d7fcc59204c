#!/usr/bin/env python3
"""
Dog Watcher
Entry point: performs one backup of DataDog boards and monitors into git
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .backup.datadog_client import DataDogClient
from .backup.git_repository import GitRepository
from .backup.pipeline import BackupPipeline
from .core.config import Config, PipelineSettings
from .core.errors import ConfigurationError, ProvisioningError
from .core.workspace import RunLock, WorkspaceManager

EXIT_FAILURE = 1
EXIT_CONFIG = 2

def setup_logging(log_level="INFO", log_file=None):
    """Setup logging configuration; falls back to console only if the log file is unusable"""
    handlers = [logging.StreamHandler()]
    file_error = None
    if log_file:
        log_path = Path(log_file).expanduser()
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_path))
        except OSError as e:
            file_error = e

    logging.basicConfig(
        level=getattr(logging, str(log_level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )

    if file_error is not None:
        logging.getLogger("dog-watcher").warning(f"Logging to console only, cannot open {log_file}: {file_error}")


def build_pipeline(config: Config, logger: logging.Logger) -> BackupPipeline:
    """Wire the pipeline collaborators from configuration"""
    settings = PipelineSettings.from_config(config)
    client = DataDogClient(
        api_key=config.get('datadog.api_key'),
        app_key=config.get('datadog.app_key'),
        api_url=config.get('datadog.api_url'),
        timeout=config.get('datadog.timeout', 30),
        event_tags=settings.event_tags,
        logger=logger
    )

    def repository_factory(workdir: Path) -> GitRepository:
        return GitRepository(
            workdir,
            executable=config.get('git.executable', 'git'),
            author_name=config.get('git.author_name', ''),
            author_email=config.get('git.author_email', ''),
            logger=logger
        )

    return BackupPipeline(
        settings=settings,
        workspaces=WorkspaceManager(logger=logger),
        repository_factory=repository_factory,
        exporter=client,
        notifier=client,
        logger=logger
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point"""
    parser = argparse.ArgumentParser(description="Dog Watcher - back up DataDog boards and monitors to git")
    parser.add_argument("--log-level", help="Logging level (defaults to LOG_LEVEL or the config file)")
    parser.add_argument("--config-dir", help="Configuration directory")

    args = parser.parse_args(argv)

    try:
        config = Config(args.config_dir)
    except ConfigurationError as e:
        setup_logging(args.log_level or "INFO")
        logging.getLogger("dog-watcher").error(str(e))
        return EXIT_CONFIG

    setup_logging(args.log_level or config.get('core.log_level', 'INFO'), config.get('core.log_file'))
    logger = logging.getLogger("dog-watcher")

    valid, errors = config.validate_config()
    if not valid:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return EXIT_CONFIG

    try:
        with RunLock(config.get('backup.lock_file')):
            logger.info("Dog Watcher backup starting...")
            report = build_pipeline(config, logger).run()
    except ProvisioningError as e:
        logger.error(str(e))
        return EXIT_FAILURE

    if report.outcome.is_failure:
        logger.error(f"Backup failed: {report.outcome.description}")
    else:
        logger.info(f"Backup finished ({report.outcome.kind.value}) in {report.run.duration:.1f}s")

    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
