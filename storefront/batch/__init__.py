"""定期実行ジョブ."""
