# Development server for the game storage application using the in-memory backend
from gamestorage_lib.main import create_app, Config
app = create_app(Config(storage_backend='memory', log_level='DEBUG', enable_brotli=False))
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=3400)
