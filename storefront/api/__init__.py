"""API層（Lambdaハンドラー）."""
