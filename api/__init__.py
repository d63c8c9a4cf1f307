import fastapi
import os
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from . import connection, customer, paymentintent, forms, license

app = fastapi.FastAPI(title="Payment form API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("SIMPAY_ALLOWED_ORIGINS", "http://localhost:5173").split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS", "PUT"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: fastapi.Request, exc: RequestValidationError):
    # Payment forms only understand {message}.
    errors = jsonable_encoder(exc.errors())
    location = ".".join(str(part) for part in errors[0].get("loc", [])[1:]) if errors else ""
    message = f"Invalid value for {location}." if location else "Invalid request."
    return JSONResponse(status_code=400, content={"message": message})


app.include_router(connection.router)
app.include_router(customer.router)
app.include_router(paymentintent.router)
app.include_router(forms.router)
app.include_router(license.router)
