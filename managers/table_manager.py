from typing import Optional
from threading import Lock
from azure.data.tables import TableServiceClient,TableClient
from azure.core.exceptions import ResourceExistsError
from azure.identity import DefaultAzureCredential
import os

class TableConnectionManager:
    _instance: Optional['TableConnectionManager'] = None
    _lock = Lock()
    client:Optional['TableServiceClient']=None
    form_table:Optional['TableClient']=None
    license_table:Optional['TableClient']=None

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    def get_client():
                        credential = DefaultAzureCredential()
                        return TableServiceClient(
                            endpoint=os.getenv("AZURE_COSMOSDB_ENDPOINT"),
                            credential=credential
                        )

                    def get_table_client(table_name:str,client:TableServiceClient):
                        try:
                            table_client = client.create_table_if_not_exists(table_name)
                        except ResourceExistsError:
                            table_client = client.get_table_client(table_name)
                        return table_client

                    instance = super().__new__(cls)
                    instance.client = get_client()
                    instance.form_table = get_table_client("form",instance.client)
                    instance.license_table = get_table_client("license",instance.client)
                    cls._instance = instance

        return cls._instance

    def __init__(self):
        pass
