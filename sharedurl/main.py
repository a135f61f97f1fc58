from fastapi import FastAPI
import os
from fastapi.middleware.cors import CORSMiddleware


from sharedurl.api.routes import health
from sharedurl.api.routes import instances
from sharedurl.api.routes import settings
from sharedurl.api.routes import view


app = FastAPI(title="Shared URL")

origins_env = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
origins = [o.strip().rstrip("/") for o in origins_env.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,  # exact matches
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(health.router, tags=["Health"])
app.include_router(view.router, tags=["View"])
app.include_router(instances.router, tags=["Instances"])
app.include_router(settings.router, tags=["Settings"])
