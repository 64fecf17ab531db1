# aimp/utils/__init__.py
