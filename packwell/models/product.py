"""Catalog models: categories and products"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .common import CamelModel, Pagination, RequestModel, utcnow


class ProductSort(str, Enum):
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    RATING = "rating"
    NEWEST = "newest"
    OLDEST = "oldest"


class ProductImage(CamelModel):
    """Hosted product image reference"""
    public_id: Optional[str] = None
    url: str


class Rating(CamelModel):
    """Aggregate rating recomputed from approved reviews"""
    average: float = 0.0
    count: int = 0


class Category(CamelModel):
    """Product category"""
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class CategorySummary(CamelModel):
    id: str
    name: str
    slug: str


class Product(CamelModel):
    """Product in the catalog"""
    id: str
    name: str
    description: str
    price: float = Field(ge=0)
    category_id: str
    stock: int = Field(ge=0, default=0)
    sku: Optional[str] = None
    images: list[ProductImage] = []
    tags: list[str] = []
    is_active: bool = True
    is_featured: bool = False
    ratings: Rating = Field(default_factory=Rating)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def primary_image(self) -> str:
        return self.images[0].url if self.images else ""

    @property
    def in_stock(self) -> bool:
        return self.stock > 0


class ProductSummary(CamelModel):
    """Product fields embedded in carts, wishlists and orders"""
    id: str
    name: str
    price: float
    images: list[ProductImage] = []
    ratings: Rating = Field(default_factory=Rating)
    is_active: bool = True
    is_featured: bool = False

    @classmethod
    def of(cls, product: Product) -> "ProductSummary":
        return cls.model_validate(product, from_attributes=True)


class ProductCreateRequest(RequestModel):
    name: str = Field(min_length=3, max_length=100)
    description: str = Field(min_length=10, max_length=1000)
    price: float = Field(ge=0)
    category: str = Field(min_length=1, description="Category ID")
    stock: int = Field(ge=0)
    sku: Optional[str] = None
    images: list[ProductImage] = []
    tags: list[str] = []
    is_active: bool = True
    is_featured: bool = False


class ProductStatusRequest(RequestModel):
    is_active: bool


class ProductFeaturedRequest(RequestModel):
    is_featured: bool


class CategoryRequest(RequestModel):
    name: str = Field(min_length=2, max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)
    image: Optional[str] = None


class CategoryStatusRequest(RequestModel):
    is_active: bool


class ProductData(CamelModel):
    product: Product


class ProductDetailData(CamelModel):
    product: Product
    related_products: list[Product]


class ProductListData(CamelModel):
    products: list[Product]
    categories: list[CategorySummary] = []
    pagination: Optional[Pagination] = None


class CategoryData(CamelModel):
    category: Category


class CategoryListData(CamelModel):
    categories: list[Category]
    pagination: Pagination
