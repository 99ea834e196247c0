from abc import ABC, abstractmethod


class AbstractAdapter(ABC):
    """
    Base class for batch adapters: `extract` pulls data into a DataFrame, `load` writes it via the db_connector.
    """

    def __init__(self, name: str, adapter_params: dict, db_connector):
        self.name = name
        self.adapter_params = adapter_params
        self.db_connector = db_connector

    @abstractmethod
    def extract(self, load_params: dict):
        pass

    @abstractmethod
    def load(self, df):
        pass
