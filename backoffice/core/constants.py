STATUS_IN_STOCK = "In Stock"
STATUS_LOW_STOCK = "Low Stock"
STATUS_OUT_OF_STOCK = "Out of Stock"
STOCK_STATUSES = (STATUS_IN_STOCK, STATUS_LOW_STOCK, STATUS_OUT_OF_STOCK)

UNIT_PIECE = "unit"
UNIT_ML = "ml"
STOCK_UNITS = (UNIT_PIECE, UNIT_ML)

MOVEMENT_IN = "IN"
MOVEMENT_OUT = "OUT"
MOVEMENT_TYPES = (MOVEMENT_IN, MOVEMENT_OUT)

REASON_SALE = "sale"
REASON_STOCK_IN = "stock_in"
REASON_STOCK_OUT = "stock_out"
REASON_ADJUSTMENT = "adjustment"
MOVEMENT_REASONS = (REASON_SALE, REASON_STOCK_IN, REASON_STOCK_OUT, REASON_ADJUSTMENT)

# Volume products are priced per 100 ml.
ML_PRICE_BASIS = 100

BOTTLE_SIZES_ML = {
    "3ml": 3,
    "6ml": 6,
}

UNKNOWN_PRODUCT_NAME = "Unknown Product"
