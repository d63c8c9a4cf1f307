from pydantic import BaseModel
from typing import List, Optional, Dict, Any, Literal
from datetime import datetime
from azure.data.tables import TableEntity
import json
import os

FieldType = Literal['email','customer_name','telephone','billing_address','text','number','dropdown','checkbox','hidden']


class FormField(BaseModel):
    name: str
    label: Optional[str] = None
    type: FieldType = 'text'
    required: bool = False
    metadata: bool = False  # value is copied into Stripe metadata

    @property
    def metadata_key(self) -> str:
        return (self.label or self.name)[:40]


class FormDefinition(BaseModel):
    id: int
    title: str = ''
    description: Optional[str] = None
    amount: int = 0  # minor currency units
    currency: str = 'usd'
    custom_amount: bool = False
    minimum_amount: int = 100
    statement_descriptor: Optional[str] = None
    livemode: bool = False
    stripe_account: Optional[str] = None
    fields: List[FormField] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }

    def get_field(self, field_type: FieldType) -> Optional[FormField]:
        return next((f for f in self.fields if f.type == field_type), None)

    def get_api_request_args(self) -> Dict[str, Any]:
        """Per-request Stripe options for this form."""
        if self.livemode:
            api_key = os.getenv("STRIPE_SECRET_KEY_LIVE") or os.getenv("STRIPE_SECRET_KEY")
        else:
            api_key = os.getenv("STRIPE_SECRET_KEY_TEST") or os.getenv("STRIPE_SECRET_KEY")

        args: Dict[str, Any] = {"api_key": api_key}
        if self.stripe_account:
            args["stripe_account"] = self.stripe_account
        return args

    def update_timestamp(self, mode: Literal['update','create','upsert']):
        if mode == 'create':
            self.created_at = datetime.now()
            self.updated_at = None
        elif mode == 'update':
            self.updated_at = datetime.now()
        elif mode == 'upsert':
            self.created_at = self.created_at or datetime.now()
            self.updated_at = datetime.now()


class PublicForm(BaseModel):
    """What a rendered payment form needs on the client. No credentials."""
    id: int
    title: str
    description: Optional[str] = None
    amount: int
    currency: str
    custom_amount: bool
    minimum_amount: int
    livemode: bool
    fields: List[FormField]
    form_nonce: str

    @classmethod
    def from_form(cls, form: FormDefinition, form_nonce: str) -> "PublicForm":
        return cls(form_nonce=form_nonce, **form.model_dump(include={
            "id","title","description","amount","currency","custom_amount","minimum_amount","livemode","fields"
        }))


class FormTableEntity(BaseModel):
    PartitionKey: str = "form"
    RowKey: str
    title: str = ''
    description: Optional[str] = None
    amount: int = 0
    currency: str = 'usd'
    custom_amount: bool = False
    minimum_amount: int = 100
    statement_descriptor: Optional[str] = None
    livemode: bool = False
    stripe_account: Optional[str] = None
    fields: str = '[]'
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_form(self) -> FormDefinition:
        deserialized_created_at = datetime.fromisoformat(self.created_at) if self.created_at else None
        deserialized_updated_at = datetime.fromisoformat(self.updated_at) if self.updated_at else None
        deserialized_fields = [FormField.model_validate(f) for f in json.loads(self.fields)]

        return FormDefinition(id=int(self.RowKey),fields=deserialized_fields,
                              created_at=deserialized_created_at,updated_at=deserialized_updated_at,
                              **self.model_dump(exclude={"PartitionKey","RowKey","fields","created_at","updated_at"}))

    @classmethod
    def from_form(cls, form: FormDefinition) -> "FormTableEntity":
        serialized_fields = json.dumps([f.model_dump() for f in form.fields])
        serialized_created_at = form.created_at.isoformat() if form.created_at else None
        serialized_updated_at = form.updated_at.isoformat() if form.updated_at else None

        return cls(RowKey=str(form.id),fields=serialized_fields,
                   created_at=serialized_created_at,updated_at=serialized_updated_at,
                   **form.model_dump(exclude={"id","fields","created_at","updated_at"}))

    @classmethod
    def from_entity(cls, entity: TableEntity) -> "FormTableEntity":
        entity_dict = dict(entity)
        return cls.model_validate(entity_dict)
