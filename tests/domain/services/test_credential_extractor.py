"""資格情報抽出のテスト."""
import pytest

from storefront.domain.services import RequestFields, extract_credential, extract_guest_token
from storefront.domain.services.credential_extractor import strip_credential_prefix


class TestExtractCredential:
    """ベアラー資格情報抽出のテスト."""

    def test_tokenヘッダーが最優先(self) -> None:
        fields = RequestFields(
            headers={"token": "first", "Authorization": "Bearer second"},
            query={"token": "third"},
        )
        assert extract_credential(fields) == "first"

    def test_ヘッダー名は大文字小文字を区別しない(self) -> None:
        fields = RequestFields(headers={"AUTHORIZATION": "Bearer abc"})
        assert extract_credential(fields) == "abc"

    def test_x_access_tokenの次にクエリとボディを見る(self) -> None:
        assert extract_credential(RequestFields(headers={"X-Access-Token": "h"}, query={"token": "q"})) == "h"
        assert extract_credential(RequestFields(query={"token": "q"}, body={"token": "b"})) == "q"
        assert extract_credential(RequestFields(body={"token": "b"})) == "b"

    @pytest.mark.parametrize(
        "raw,expected",
        [("Bearer abc", "abc"), ("Token abc", "abc"), ("JWT abc", "abc"), ("abc", "abc"), ("  abc ", "abc")],
    )
    def test_既知のプレフィックスを除去(self, raw: str, expected: str) -> None:
        assert strip_credential_prefix(raw) == expected

    def test_プレフィックスだけの値は資格情報なし(self) -> None:
        fields = RequestFields(headers={"Authorization": "Bearer "})
        assert extract_credential(fields) is None

    def test_空文字は無視して次の場所を見る(self) -> None:
        fields = RequestFields(headers={"token": "  "}, query={"token": "q"})
        assert extract_credential(fields) == "q"

    def test_何もなければNone(self) -> None:
        assert extract_credential(RequestFields()) is None


class TestExtractGuestToken:
    """ゲストトークン抽出のテスト."""

    def test_ヘッダーの優先順位(self) -> None:
        fields = RequestFields(
            headers={"x-guest-session": "second", "X-Session-Id": "first"},
            query={"sessionId": "third"},
        )
        assert extract_guest_token(fields) == "first"

    def test_クエリとボディ(self) -> None:
        assert extract_guest_token(RequestFields(query={"sessionId": "q"}, body={"sessionId": "b"})) == "q"
        assert extract_guest_token(RequestFields(body={"sessionId": "b"})) == "b"

    def test_ボディが辞書でなければ無視(self) -> None:
        assert extract_guest_token(RequestFields(body=["sessionId"])) is None
