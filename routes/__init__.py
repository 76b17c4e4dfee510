from fastapi import FastAPI
from routes.events import init_events_routes
from routes.todo_lists import init_todo_lists_routes
from routes.search import init_search_routes

def init_routes(app: FastAPI):
    """Initialize all application routes"""
    # Initialize events routes
    events_router = init_events_routes()
    app.include_router(events_router)

    # Initialize todo list and item routes
    todo_lists_router = init_todo_lists_routes()
    app.include_router(todo_lists_router)

    # Initialize search routes
    search_router = init_search_routes()
    app.include_router(search_router)

    return app
