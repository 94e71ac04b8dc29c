import uuid
from datetime import timedelta
from decimal import Decimal

import factory
from django.utils import timezone
from django.utils.text import slugify

from authentication.tests.factories import AdminFactory, SellerFactory, UserFactory  # noqa: F401
from marketplace.models import (
    Cart,
    CartItem,
    Category,
    Coupon,
    Order,
    OrderItem,
    Product,
    ProductAnswer,
    ProductImage,
    ProductQuestion,
    ProductReview,
    ReviewResponse,
    Store,
)


class CategoryFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Category

    name = factory.Sequence(lambda n: f"Category {n}")
    slug = factory.LazyAttribute(lambda o: slugify(o.name))
    description = factory.Faker("text", max_nb_chars=200)
    is_active = True


class StoreFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Store

    id = factory.LazyFunction(uuid.uuid4)
    owner = factory.SubFactory(SellerFactory)
    name = factory.Sequence(lambda n: f"Store {n}")
    slug = factory.LazyAttribute(lambda o: slugify(o.name))
    description = factory.Faker("sentence", nb_words=10)
    contact_email = factory.Sequence(lambda n: f"store_{n}@example.com")
    is_active = True


class ProductFactory(factory.django.DjangoModelFactory):
    """Approved, active product: what buyers can see and order."""

    class Meta:
        model = Product

    id = factory.LazyFunction(uuid.uuid4)
    name = factory.Sequence(lambda n: f"Product {n}")
    description = factory.Faker("paragraph", nb_sentences=3)
    brand = factory.Faker("company")
    store = factory.SubFactory(StoreFactory)
    seller = factory.LazyAttribute(lambda o: o.store.owner)
    category = factory.SubFactory(CategoryFactory)
    price = Decimal("100.00")
    discount_price = None
    stock_quantity = 10
    is_active = True
    is_featured = False
    approval_status = "approved"
    submitted_at = factory.LazyFunction(timezone.now)
    approved_at = factory.LazyFunction(timezone.now)


class PendingProductFactory(ProductFactory):
    is_active = False
    approval_status = "pending"
    approved_at = None


class RejectedProductFactory(ProductFactory):
    is_active = False
    approval_status = "rejected"
    approved_at = None
    reject_reason = "Photos are blurry"
    rejected_at = factory.LazyFunction(timezone.now)


class ProductImageFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ProductImage

    product = factory.SubFactory(ProductFactory)
    storage_key = factory.Sequence(lambda n: f"products/test/image-{n}.jpg")
    original_filename = "image.jpg"
    content_type = "image/jpeg"
    alt_text = factory.Faker("sentence", nb_words=5)
    is_primary = False
    order = 0


class ProductReviewFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ProductReview

    product = factory.SubFactory(ProductFactory)
    user = factory.SubFactory(UserFactory)
    rating = 5
    title = factory.Faker("sentence", nb_words=4)
    comment = factory.Faker("paragraph", nb_sentences=2)


class ReviewResponseFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ReviewResponse

    review = factory.SubFactory(ProductReviewFactory)
    user = factory.LazyAttribute(lambda o: o.review.product.store.owner)
    response = "Thank you for your feedback!"


class ProductQuestionFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ProductQuestion

    product = factory.SubFactory(ProductFactory)
    user = factory.SubFactory(UserFactory)
    question_text = "Does this come with a warranty?"
    is_approved = True


class ProductAnswerFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ProductAnswer

    question = factory.SubFactory(ProductQuestionFactory)
    user = factory.LazyAttribute(lambda o: o.question.product.store.owner)
    answer_text = "Yes, two years of warranty."
    is_approved = True


class CartFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Cart

    user = factory.SubFactory(UserFactory)


class CartItemFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = CartItem

    cart = factory.SubFactory(CartFactory)
    product = factory.SubFactory(ProductFactory)
    quantity = 1


class OrderFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Order

    id = factory.LazyFunction(uuid.uuid4)
    buyer = factory.SubFactory(UserFactory)
    store = factory.SubFactory(StoreFactory)
    status = "pending"
    payment_status = "pending"
    subtotal_amount = Decimal("100.00")
    shipping_fee = Decimal("0.00")
    discount_amount = Decimal("0.00")
    total_amount = Decimal("100.00")
    shipping_address = "Ayşe Yılmaz, Moda Cad. 1, Kadıköy, İstanbul, 34710, Türkiye"


class OrderItemFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = OrderItem

    order = factory.SubFactory(OrderFactory)
    product = factory.SubFactory(ProductFactory, store=factory.SelfAttribute("..order.store"))
    product_name = factory.LazyAttribute(lambda o: o.product.name)
    quantity = 1
    price = Decimal("100.00")
    total_price = factory.LazyAttribute(lambda o: o.price * o.quantity)
    seller_amount = factory.LazyAttribute(lambda o: (o.price * o.quantity * Decimal("0.90")).quantize(Decimal("0.01")))


class CouponFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Coupon

    code = factory.Sequence(lambda n: f"SAVE{n}")
    description = factory.Faker("sentence")
    discount_type = "percentage"
    discount_value = Decimal("10.00")
    expiry_date = factory.LazyFunction(lambda: timezone.now() + timedelta(days=30))
    uses_per_user = 1
    is_active = True
