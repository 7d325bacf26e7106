"""
API層パッケージ

このパッケージはHTTPエンドポイント（Controller）と共通の依存関係を提供します。
"""
