# backend/previewer/routers/__init__.py
