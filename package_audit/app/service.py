"""OSS Index 배치 감사 서비스(OSS Index batch audit service)."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import httpx

from common_lib.cache import ReportCache
from common_lib.config import get_settings
from common_lib.logger import get_logger
from common_lib.retry_config import get_retry_decorator
from src.core.errors import AuditIOError

from .base import IPackageRequest
from .models import PackageDescriptor, PackageReport, Vulnerability

logger = get_logger(__name__)

SERVICE_NAME = "OSS Index"


class PackageRequest(IPackageRequest):
    """OSS Index 배치 감사 요청(Batch audit request against OSS Index).

    Descriptors accumulate through :meth:`add`; :meth:`run` drains them, so a
    later ``add`` starts a fresh batch.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        cache: Optional[ReportCache] = None,
    ) -> None:
        settings = get_settings()
        self._base_url = (base_url or settings.ossindex_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.http_timeout
        self._batch_size = settings.audit_batch_size
        self._retry_attempts = settings.retry_attempts
        self._allow_external = settings.allow_external_calls
        self._user_agent = settings.app_name
        self._auth: Optional[Tuple[str, str]] = None
        if settings.ossindex_username and settings.ossindex_token:
            self._auth = (settings.ossindex_username, settings.ossindex_token)
        else:
            logger.debug("OSS Index 인증 정보 없음(No OSS Index credentials); using anonymous rate limits")
        self._cache = cache
        self._pending: List[PackageDescriptor] = []

    def add(
        self, ecosystem: str, group_id: str, artifact_id: str, version: Optional[str]
    ) -> PackageDescriptor:
        """패키지 등록(Register one package identity for audit)."""

        descriptor = PackageDescriptor(
            ecosystem=ecosystem,
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
        )
        self._pending.append(descriptor)
        return descriptor

    @property
    def pending(self) -> List[PackageDescriptor]:
        return list(self._pending)

    def run(self) -> List[PackageReport]:
        """등록된 패키지 감사 실행(Audit every registered package)."""

        descriptors, self._pending = self._pending, []
        if not descriptors:
            return []

        if not self._allow_external:
            logger.info(
                "외부 감사 조회 비활성화됨(External audit lookups disabled); returning %d unaudited records.",
                len(descriptors),
            )
            return [PackageReport(package=descriptor, audited=False) for descriptor in descriptors]

        cache = self._get_cache()
        purls = [descriptor.purl for descriptor in descriptors]
        entries: Dict[str, Any] = cache.get_many(purls)
        missing = [purl for purl in purls if purl not in entries]
        if entries:
            logger.info("캐시 적중(Cache hit for %d of %d packages)", len(entries), len(purls))

        fetched = self._fetch_reports(missing)
        entries.update(fetched)

        try:
            reports = [self._build_report(descriptor, entries.get(descriptor.purl)) for descriptor in descriptors]
        except (TypeError, ValueError) as exc:
            logger.error("OSS Index 보고서 변환 실패(Malformed component report): %s", exc)
            raise AuditIOError(SERVICE_NAME, message=f"malformed component report: {exc}") from exc

        # Only entries that produced a valid report are cached.
        for purl, entry in fetched.items():
            cache.set(purl, entry)
        logger.info(
            "OSS Index 감사 완료(Audit completed: packages=%d, vulnerable=%d)",
            len(reports),
            sum(1 for report in reports if report.is_vulnerable),
        )
        return reports

    def close(self) -> None:
        """캐시 해제(Release the report cache)."""

        if self._cache is not None:
            self._cache.close()
            self._cache = None

    def _get_cache(self) -> ReportCache:
        if self._cache is None:
            self._cache = ReportCache(namespace="ossindex")
        return self._cache

    def _fetch_reports(self, purls: List[str]) -> Dict[str, Any]:
        """OSS Index에 좌표 묶음 조회(Query OSS Index in chunks of the batch size)."""

        results: Dict[str, Any] = {}
        if not purls:
            return results

        post = get_retry_decorator(self._retry_attempts)(self._post_batch)
        headers = {
            "Accept": "application/vnd.ossindex.component-report.v1+json",
            "User-Agent": self._user_agent,
        }
        try:
            with httpx.Client(timeout=self._timeout, auth=self._auth, headers=headers) as client:
                for start in range(0, len(purls), self._batch_size):
                    chunk = purls[start : start + self._batch_size]
                    payload = post(client, chunk)
                    if not isinstance(payload, list):
                        raise AuditIOError(SERVICE_NAME, message="unexpected component-report payload")

                    by_coordinates = {
                        str(entry.get("coordinates", "")).lower(): entry
                        for entry in payload
                        if isinstance(entry, dict)
                    }
                    for purl in chunk:
                        entry = by_coordinates.get(purl.lower())
                        if entry is not None:
                            results[purl] = entry
                    logger.debug("OSS Index chunk processed (size=%d, reported=%d)", len(chunk), len(by_coordinates))
        except httpx.HTTPStatusError as exc:
            logger.error("OSS Index HTTP 오류(HTTP error): %s", exc)
            raise AuditIOError(SERVICE_NAME, exc.response.status_code, str(exc)) from exc
        except httpx.HTTPError as exc:
            logger.error("OSS Index 네트워크 오류(Network error): %s", exc)
            raise AuditIOError(SERVICE_NAME, message=str(exc)) from exc
        except ValueError as exc:
            logger.error("OSS Index 응답 파싱 실패(Failed to parse response): %s", exc)
            raise AuditIOError(SERVICE_NAME, message=f"invalid JSON response: {exc}") from exc

        return results

    def _post_batch(self, client: httpx.Client, coordinates: List[str]) -> Any:
        response = client.post(f"{self._base_url}/component-report", json={"coordinates": coordinates})
        response.raise_for_status()
        return response.json()

    @classmethod
    def _build_report(cls, descriptor: PackageDescriptor, entry: Optional[Dict[str, Any]]) -> PackageReport:
        if entry is None:
            return PackageReport(package=descriptor)

        vulnerabilities = [
            cls._parse_vulnerability(item)
            for item in entry.get("vulnerabilities") or []
            if isinstance(item, dict)
        ]
        return PackageReport(
            package=descriptor,
            reference=entry.get("reference"),
            description=entry.get("description"),
            vulnerabilities=vulnerabilities,
        )

    @staticmethod
    def _parse_vulnerability(item: Dict[str, Any]) -> Vulnerability:
        score = item.get("cvssScore")
        return Vulnerability(
            id=str(item.get("id") or item.get("displayName") or ""),
            title=item.get("title") or "",
            description=item.get("description") or "",
            cvss_score=float(score) if score is not None else None,
            cvss_vector=item.get("cvssVector"),
            cve=item.get("cve"),
            cwe=item.get("cwe"),
            reference=item.get("reference"),
        )
