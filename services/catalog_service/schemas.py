from shared.schemas import CamelModel


class AdResponse(CamelModel):
    id: str
    image_url: str
    action: str
    action_type: str


class CategoryResponse(CamelModel):
    id: str
    name: str
    image_url: str


class ProductResponse(CamelModel):
    id: str
    name: str
    description: str
    price: float
    image_url: str
    category_id: str
