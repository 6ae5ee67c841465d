# services/search_service.py
from constants.roles import UserRole
from constants.work_item import normalize_type
from repositories.release_repository import ReleaseRepository
from utils.permissions import accessible_applications

MIN_QUERY_LENGTH = 2
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
SHORT_QUERY_MESSAGE = "Please enter at least 2 characters to search"

WORK_ITEM_FIELDS = ("_id", "id", "type", "title", "flagName", "remarks", "hyperlink", "parentId", "actualHours")


def _match(item: dict, needle: str):
    """返回 (matchType, matchText, 位置)；不匹配返回 None。id 命中优先于标题"""
    external_id = item.get("id") or ""
    pos = external_id.lower().find(needle) if external_id else -1
    if pos >= 0:
        return "id", external_id, pos
    title = item.get("title") or ""
    pos = title.lower().find(needle)
    if pos >= 0:
        return "title", title, pos
    return None


class SearchService:

    @staticmethod
    def search(user, query: str | None, limit: int = DEFAULT_LIMIT, item_type: str | None = None) -> dict:
        query = (query or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            return {"results": [], "totalCount": 0, "message": SHORT_QUERY_MESSAGE}
        limit = max(1, min(limit or DEFAULT_LIMIT, MAX_LIMIT))
        wanted_type = normalize_type(item_type) if item_type else None
        if item_type and wanted_type is None:
            # 未知类型不会命中任何工作项
            return {"results": [], "totalCount": 0, "query": query, "hasMore": False}
        needle = query.lower()

        def item_matches(item: dict) -> bool:
            if wanted_type and item.get("type") != wanted_type:
                return False
            return _match(item, needle) is not None

        releases = ReleaseRepository.search_candidates(
            item_matches,
            limit * 2,
            applications=accessible_applications(user),
            published_only=user.role == UserRole.BASIC.value,
        )

        matches = []
        for release in releases:
            summary = release.to_summary()
            created_at = release.created_at
            for item in release.work_items or []:
                if wanted_type and item.get("type") != wanted_type:
                    continue
                hit = _match(item, needle)
                if hit is None:
                    continue
                match_type, match_text, pos = hit
                matches.append((
                    (0 if match_type == "id" else 1, pos, -(created_at.timestamp() if created_at else 0)),
                    {
                        "workItem": {k: item.get(k) for k in WORK_ITEM_FIELDS},
                        "release": summary,
                        "matchType": match_type,
                        "matchText": match_text,
                    },
                ))

        # 先收集全部命中再排序截断
        matches.sort(key=lambda m: m[0])
        return {
            "results": [m[1] for m in matches[:limit]],
            "totalCount": len(matches),
            "query": query,
            "hasMore": len(matches) > limit,
        }
