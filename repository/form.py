from azure.data.tables import TableClient,UpdateMode
from azure.core.exceptions import ResourceNotFoundError
from managers.table_manager import TableConnectionManager
from models.form import FormDefinition,FormTableEntity
from typing import Dict, Optional, Union
import logging

logger = logging.getLogger(__name__)


class FormRepository:
    """Payment form definitions stored in the `form` table."""

    def __init__(self, table: Optional[TableClient] = None):
        self._table = table
        # One instance per request, so a form is read from the table once.
        self._forms: Dict[str, Optional[FormDefinition]] = {}

    @property
    def table(self) -> TableClient:
        if self._table is None:
            self._table = TableConnectionManager().form_table
        return self._table

    def get(self, form_id: Union[int, str]) -> Optional[FormDefinition]:
        """Look up a form. None when no form has this id."""
        row_key = str(form_id)
        if row_key in self._forms:
            return self._forms[row_key]

        try:
            entity = self.table.get_entity(partition_key='form', row_key=row_key)
        except ResourceNotFoundError:
            form = None
        except Exception as e:
            raise ValueError(f"Error retrieving form {form_id}: {str(e)}")
        else:
            form = FormTableEntity.from_entity(entity).to_form()

        self._forms[row_key] = form
        return form

    def upsert(self, form: FormDefinition) -> FormDefinition:
        try:
            form.update_timestamp('upsert')
            form_entity = FormTableEntity.from_form(form)
            self.table.upsert_entity(mode=UpdateMode.REPLACE, entity=form_entity.model_dump(exclude_none=True))
            self._forms[str(form.id)] = form
            logger.info(f"Saved form {form.id}")
            return form
        except Exception as e:
            raise ValueError(f"Error saving form {form.id}: {str(e)}")


def get_form_repository() -> FormRepository:
    return FormRepository()
