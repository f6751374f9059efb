"""リクエスト主体の解決."""
from storefront.domain.services import RequestFields, ResolvedRequest
from storefront.domain.value_objects import RoutePolicy, SessionMetadata

from .dependencies import Dependencies
from .request import get_body, get_header, get_headers, get_query_parameters, get_source_ip


def request_fields_from_event(event: dict) -> RequestFields:
    """Lambda イベントから主体解決用の値を取り出す.

    ボディがJSONオブジェクトでない場合はボディを無視する。
    """
    try:
        body = get_body(event)
    except ValueError:
        body = {}
    return RequestFields(
        headers=get_headers(event),
        query=get_query_parameters(event),
        body=body,
    )


def metadata_from_event(event: dict) -> SessionMetadata:
    """Lambda イベントからゲストセッションのメタデータを作る."""
    return SessionMetadata.from_request(
        ip_address=get_source_ip(event),
        user_agent=get_header(event, "user-agent"),
        referrer=get_header(event, "referer"),
    )


def resolve_identity(event: dict, policy: RoutePolicy) -> ResolvedRequest:
    """リクエストの主体を解決する.

    Args:
        event: Lambda イベント
        policy: ルートの認証ポリシー

    Returns:
        解決結果

    Raises:
        UnauthenticatedError: 認証必須ルートで主体を解決できない場合
        ForbiddenError: ロールが許可されていない場合
    """
    resolver = Dependencies.get_identity_resolver()
    return resolver.resolve(
        request_fields_from_event(event),
        policy,
        metadata=metadata_from_event(event),
    )
