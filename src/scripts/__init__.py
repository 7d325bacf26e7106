"""
運用スクリプトパッケージ

1回実行して終了するメンテナンス用コマンド（スキーマ確認、マイグレーション）を提供します。
"""
