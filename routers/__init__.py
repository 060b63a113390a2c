# routers/__init__.py
# Routers are registered one by one in main.create_app
