# product_service/main.py
from fastapi import FastAPI, HTTPException

app = FastAPI(title="Product Service (dev mock)")


PRODUCTS = {
    "P1": {"id": "P1", "productName": "Sunscreen SPF50", "sellingPrice": 1000, "salePercentage": 10},
    "P2": {"id": "P2", "productName": "Hydrating Serum", "sellingPrice": 459, "salePercentage": None},
    "P3": {"id": "P3", "productName": "Cleansing Foam", "sellingPrice": 250, "salePercentage": 15},
}

@app.get("/products/{product_id}")
def get_product(product_id: str):
    product = PRODUCTS.get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
