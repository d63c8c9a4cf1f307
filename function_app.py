import azure.functions as func
from api import app as fastapi_app

# Hosts the FastAPI app as an HTTP-triggered Azure Function.
app = func.AsgiFunctionApp(app=fastapi_app, http_auth_level=func.AuthLevel.ANONYMOUS)
