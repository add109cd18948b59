from __future__ import annotations

from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin
from rest_framework.exceptions import APIException, NotAuthenticated, PermissionDenied

from store_core.common.api.exceptions import build_error_envelope
from store_core.common.scope import StoreScope, resolve_store_id, store_header


class StoreScopeMiddleware(MiddlewareMixin):
    """
    Resolves the caller's store for API requests.

    Behavior:
      - Enforced for both /api/v1/* and /api/* (alias).
      - Auth (token) endpoints and docs/schema/admin are never scoped.
      - Anonymous requests pass through; DRF authentication decides, and
        views resolve the scope themselves via require_store_scope().
      - Invalid X-Store-Id -> 400 envelope; foreign store or no store -> 403 envelope.
      - On success -> attaches request.store_scope and request.store_id.
    """

    ENFORCED_PREFIXES = ("/api/v1/", "/api/")

    PUBLIC_PATH_PREFIXES = (
        "/admin/",
        "/api/docs/",
        "/api/schema/",
    )

    AUTH_PATH_MARKERS = (
        "/auth/token/",
    )

    def _starts_with_any(self, path: str, prefixes: tuple[str, ...]) -> bool:
        return any(path.startswith(p) for p in prefixes)

    def _json_error(self, request, *, status_code: int, code: str, message: str) -> JsonResponse:
        return JsonResponse(
            build_error_envelope(request=request, code=code, message=message, details=None),
            status=status_code,
        )

    def process_request(self, request):
        request.store_scope = None
        request.store_id = None

        path = getattr(request, "path", "") or ""

        if self._starts_with_any(path, self.PUBLIC_PATH_PREFIXES):
            return None

        if not self._starts_with_any(path, self.ENFORCED_PREFIXES):
            return None

        if any(marker in path for marker in self.AUTH_PATH_MARKERS):
            return None

        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return None

        try:
            store_id = resolve_store_id(user=user, raw_store_id=store_header(request))
        except NotAuthenticated:
            return None
        except PermissionDenied as exc:
            return self._json_error(request, status_code=403, code="permission_denied", message=str(exc.detail))
        except APIException as exc:
            detail = exc.detail.get("detail") if isinstance(exc.detail, dict) else exc.detail
            return self._json_error(request, status_code=exc.status_code, code="validation_error", message=str(detail))

        request.store_scope = StoreScope(store_id=store_id)
        request.store_id = store_id
        return None
