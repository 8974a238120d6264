"""의존성 감사 실행기(Dependency audit runner)."""
from __future__ import annotations

import argparse
import json
from typing import Any, Dict, Iterable, List, Optional

from dotenv import load_dotenv

from common_lib.config import load_environment
from common_lib.logger import get_logger
from src.core.auditor import DependencyAuditor
from src.core.coordinates import ArtifactCoordinates, parse_artifact, parse_exclusion
from src.core.data import serialize_audit_report
from src.core.errors import DataValidationError

# Load .env file at startup
load_dotenv()

logger = get_logger(__name__)


def run_audit(
    artifacts: Iterable[ArtifactCoordinates],
    exclusions: Iterable[str] = (),
    auditor: Optional[DependencyAuditor] = None,
) -> Dict[str, Any]:
    """루트 아티팩트 감사 후 보고서 반환(Audit the root artifacts and return the report)."""

    excluded = frozenset(exclusions)
    with auditor or DependencyAuditor() as session:
        for coordinates in artifacts:
            logger.info(
                "[COLLECT] %s:%s:%s",
                coordinates.group_id,
                coordinates.artifact_id,
                coordinates.version or "",
            )
            session.add(coordinates.group_id, coordinates.artifact_id, coordinates.version, excluded)
        logger.info("[AUDIT] %d packages queued", len(session.packages))
        reports = session.run()
    return serialize_audit_report(reports)


def _artifact_arg(value: str) -> ArtifactCoordinates:
    try:
        return parse_artifact(value)
    except DataValidationError as exc:
        raise argparse.ArgumentTypeError(exc.reason) from exc


def _exclusion_arg(value: str) -> str:
    try:
        return parse_exclusion(value)
    except DataValidationError as exc:
        raise argparse.ArgumentTypeError(exc.reason) from exc


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    """커맨드라인 인자 파싱(Parse CLI arguments)."""

    parser = argparse.ArgumentParser(description="Maven 전이 의존성 취약점 감사기(Transitive dependency auditor)")
    parser.add_argument(
        "--artifact",
        dest="artifacts",
        action="append",
        required=True,
        type=_artifact_arg,
        help="감사할 루트 아티팩트 group:artifact[:version](Root artifact, repeatable)",
    )
    parser.add_argument(
        "--exclude",
        dest="exclusions",
        action="append",
        default=[],
        type=_exclusion_arg,
        help="제외할 group:artifact(Dependency to exclude, repeatable)",
    )
    return parser.parse_args(None if argv is None else list(argv))


def main(argv: Optional[List[str]] = None) -> None:
    """동기 진입점(Synchronous entrypoint)."""

    load_environment()
    args = parse_args(argv)
    report = run_audit(args.artifacts, args.exclusions)
    logger.info("Audit run completed; emitting JSON report.")
    print(json.dumps(report, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
