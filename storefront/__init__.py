"""MLB Storefront - cart and checkout core."""
