from backoffice.config import get_settings
from backoffice.core.constants import (
    STATUS_IN_STOCK,
    STATUS_LOW_STOCK,
    STATUS_OUT_OF_STOCK,
    STOCK_UNITS,
    UNIT_ML,
)


def low_stock_threshold(unit, settings=None):
    if unit not in STOCK_UNITS:
        raise ValueError("Unknown stock unit: {}".format(unit))
    settings = settings or get_settings()
    if unit == UNIT_ML:
        return settings.LOW_STOCK_ML
    return settings.LOW_STOCK_UNITS


def classify_stock(quantity, threshold):
    if quantity <= 0:
        return STATUS_OUT_OF_STOCK
    if quantity <= threshold:
        return STATUS_LOW_STOCK
    return STATUS_IN_STOCK


def stock_status(quantity, unit, settings=None):
    return classify_stock(quantity, low_stock_threshold(unit, settings))
