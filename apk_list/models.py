"""Catalog product model and the APK value score."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

PRODUCT_PAGE_URL = "https://www.systembolaget.se/{number}"


class Product(BaseModel):
    """A product as returned by the retailer catalog.

    Field aliases follow the PascalCase keys of the catalog API. Display
    fields are optional; the numeric fields used by the value score are
    mandatory and a record without them fails validation.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    product_id: Optional[str] = Field(default=None, alias="ProductId")
    product_number: Optional[str] = Field(default=None, alias="ProductNumber")
    product_name_bold: Optional[str] = Field(default=None, alias="ProductNameBold")
    product_name_thin: Optional[str] = Field(default=None, alias="ProductNameThin")
    producer_name: Optional[str] = Field(default=None, alias="ProducerName")
    country: Optional[str] = Field(default=None, alias="Country")

    category: Optional[str] = Field(default=None, alias="Category")
    sub_category: Optional[str] = Field(default=None, alias="SubCategory")
    assortment: Optional[str] = Field(default=None, alias="Assortment")
    assortment_text: Optional[str] = Field(default=None, alias="AssortmentText")

    alcohol_percentage: float = Field(alias="AlcoholPercentage", ge=0)
    volume: float = Field(alias="Volume", gt=0)
    price: float = Field(alias="Price", ge=0)
    recycle_fee: float = Field(alias="RecycleFee", ge=0)
    is_completely_out_of_stock: bool = Field(default=False, alias="IsCompletelyOutOfStock")

    @property
    def display_name(self) -> str:
        parts = (self.product_name_bold, self.product_name_thin)
        return " ".join(part for part in parts if part)

    @property
    def url(self) -> Optional[str]:
        if not self.product_number:
            return None
        return PRODUCT_PAGE_URL.format(number=self.product_number)


def value_score(product: Product) -> float:
    """Alcohol per krona: alcohol_percentage * volume / (price + recycle_fee).

    A product that costs nothing in total has no meaningful score; it gets
    0.0 so that it ranks last instead of rendering as inf or nan.
    """
    cost = product.price + product.recycle_fee
    if cost <= 0:
        return 0.0
    return product.alcohol_percentage * product.volume / cost
