import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from strawberry.fastapi import GraphQLRouter

from blog_posts.dependencies import get_graphql_context
from blog_posts.perf import performance_middleware
from blog_posts.routes import posts
from blog_posts.schema import schema
from blog_posts.settings import settings
from blog_posts.store import init_db

logger = logging.getLogger(__name__)
logging.basicConfig()
logging.getLogger("blog_posts").setLevel(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Initialize database
    await init_db()
    logger.info("Database ready")
    yield


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(performance_middleware)

graphql_app = GraphQLRouter(schema, context_getter=get_graphql_context)
app.include_router(graphql_app, prefix="/graphql")
app.include_router(posts.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("blog_posts.main:app", host="127.0.0.1", port=8000, reload=True)
