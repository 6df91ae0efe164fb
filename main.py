import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi import _rate_limit_exceeded_handler

from dotenv import load_dotenv
# Load environment variables from .env file before the settings are read
load_dotenv()

from ideaboard.core.config import settings
from ideaboard.core.limiter import limiter
from ideaboard.core.logging import setup_logging
from ideaboard.api.v1.routes import ideas

setup_logging(settings.LOG_LEVEL)

# Main app for requests at the base url. This will serve documentation etc, but all API endpoints must go to a versioned one.
app = FastAPI(
  title=settings.PROJECT_NAME
)

### V1 ###
v1_app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
)
app.mount(settings.API_V1_STR, v1_app)
v1_app.include_router(ideas.router)
v1_app.state.limiter = limiter
v1_app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
### /V1 ###

def comma_separated(value: str) -> list:
    return [item.strip() for item in value.split(",") if item.strip()]

app.add_middleware(CORSMiddleware,
                   allow_origins=comma_separated(settings.CORS_ALLOW_ORIGINS),
                   allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
                   allow_methods=comma_separated(settings.CORS_ALLOW_METHODS),
                   allow_headers=comma_separated(settings.CORS_ALLOW_HEADERS)
                   )

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

@app.get("/")
def index():
    return {"message": "Hello There! To analyze ideas, send a problem statement and a list of ideas to the /v1/analyze endpoint."}

def run():
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())

if __name__ == "__main__":
    run()
