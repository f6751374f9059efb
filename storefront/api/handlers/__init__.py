"""APIハンドラー."""
