from tradedocs.normalization.models import BolData, Container, DateField, Product, Quantity
from tradedocs.normalization.normalizer import normalize
from tradedocs.normalization.serializer import bol_data_to_dict

__all__ = [
    "BolData",
    "Container",
    "DateField",
    "Product",
    "Quantity",
    "bol_data_to_dict",
    "normalize",
]
