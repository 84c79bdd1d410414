"""TradeHub backend: marketplace rules and the API that applies them."""
