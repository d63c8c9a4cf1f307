from azure.core.exceptions import ResourceNotFoundError
from managers.table_manager import TableConnectionManager
from models.license import License,LicenseTableEntity


def get_license() -> License:
    """Stored license, or an empty one when none has been activated."""
    try:
        manager = TableConnectionManager()
        entity = manager.license_table.get_entity(partition_key='license', row_key='license')
        return LicenseTableEntity.from_entity(entity).to_license()
    except ResourceNotFoundError:
        return License()
    except Exception as e:
        raise ValueError(f"Error retrieving license: {str(e)}")
