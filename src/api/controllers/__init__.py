"""
Controller パッケージ

各モジュールが APIRouter を公開し、main.create_app() で登録されます。
"""
