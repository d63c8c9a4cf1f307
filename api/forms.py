from fastapi import APIRouter, HTTPException, Path, Body, Depends
from models.form import FormDefinition, PublicForm
from managers.auth_manager import JWTPayload, requires_scope
from managers.nonce_manager import NonceManager, FORM_NONCE_ACTION, get_nonce_manager
from repository.form import FormRepository, get_form_repository
from api.dependencies import NAMESPACE

router = APIRouter(prefix=f"{NAMESPACE}/forms")


@router.get("/{form_id}", response_model=PublicForm, tags=["forms"])
async def get_form(
    form_id: int = Path(..., description="Payment form ID"),
    forms: FormRepository = Depends(get_form_repository),
    nonces: NonceManager = Depends(get_nonce_manager),
):
    """Form configuration for rendering, with a fresh form nonce."""
    try:
        form = forms.get(form_id)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if form is None:
        raise HTTPException(status_code=404, detail=f"Payment form {form_id} not found")
    return PublicForm.from_form(form, nonces.create_nonce(FORM_NONCE_ACTION))


@router.put("/{form_id}", response_model=FormDefinition, tags=["forms"])
async def put_form(
    form_id: int = Path(..., description="Payment form ID"),
    form: FormDefinition = Body(..., description="Form definition to save"),
    forms: FormRepository = Depends(get_form_repository),
    token_data: JWTPayload = Depends(requires_scope("forms.write")),
):
    """Create or replace a payment form."""
    if form.id != form_id:
        raise HTTPException(status_code=400, detail=f"Form id {form.id} does not match path id {form_id}")
    try:
        return forms.upsert(form)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e))
