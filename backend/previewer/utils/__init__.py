# backend/previewer/utils/__init__.py
