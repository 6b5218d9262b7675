"""BookDP (WooCommerce) DOM selector constants with fallbacks.

Each constant is a tuple so callers iterate until a match is found.
"""

# --- Result grid, waited on after navigation ---
RESULTS_CONTAINER: str = ".products"

# --- Product card ---
CARD_SELECTORS: tuple[str, ...] = (
    ".product-inner",
    "li.product",
)

# --- Title link inside a card ---
TITLE_LINK_SELECTORS: tuple[str, ...] = (
    ".product-summary .woocommerce-loop-product__title a",
    ".woocommerce-loop-product__title a",
    "a.woocommerce-LoopProduct-link",
)

# --- Selling price: sale price first, then the plain price ---
CURRENT_PRICE_SELECTORS: tuple[str, ...] = (
    ".product-summary .price ins .woocommerce-Price-amount",
    ".price ins .woocommerce-Price-amount",
    ".product-summary .price .woocommerce-Price-amount",
    ".price .woocommerce-Price-amount",
)

# --- Struck-through price, only present on discounted items ---
ORIGINAL_PRICE_SELECTORS: tuple[str, ...] = (
    ".product-summary .price del .woocommerce-Price-amount",
    ".price del .woocommerce-Price-amount",
)

# --- Short description in the listing ---
SHORT_DESCRIPTION_SELECTORS: tuple[str, ...] = (
    ".product-summary .woocommerce-product-details__short-description",
    ".woocommerce-product-details__short-description",
)

# --- Long description on the product page ---
DETAIL_DESCRIPTION_SELECTORS: tuple[str, ...] = (
    ".woocommerce-tabs--description-content p",
    "#tab-description p",
)
