from . import auth, compress, history, share, storage

routers = [
    auth.router,
    compress.router,
    share.router,
    history.router,
    storage.router,
]

__all__ = [
    "routers",
]
