"""プロジェクト構成の規約適合チェッカー。"""

__version__ = "0.1.0"
