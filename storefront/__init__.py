"""storefront: ゲストセッションとカート整合性を扱うバックエンド."""
