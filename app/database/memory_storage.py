import logging
from typing import Any, Dict, List, Type, TypeVar

from app.database.storage import FEATURED_LIMIT, TEXT_SEARCH_FIELDS, Storage, tokenize
from app.models.base import Document, new_id, utcnow
from app.models.car.car import Car
from app.models.dealer.dealer import Dealer

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Document)

SAMPLE_DEALERS = [
    {
        "name": "Premium Auto Group",
        "location": "Downtown, NYC",
        "description": "Luxury and premium vehicles",
        "phone": "(555) 123-4567",
        "email": "contact@premiumauto.com",
        "address": "123 Auto Street, NYC, NY 10001",
        "rating": 4.9,
        "review_count": 156,
        "verified": True,
    },
    {
        "name": "Elite Motors",
        "location": "Beverly Hills, CA",
        "description": "Elite luxury vehicle dealer",
        "phone": "(555) 234-5678",
        "email": "info@elitemotors.com",
        "address": "456 Luxury Ave, Beverly Hills, CA 90210",
        "rating": 4.7,
        "review_count": 89,
        "verified": True,
    },
    {
        "name": "Family Auto Center",
        "location": "Austin, TX",
        "description": "Family-owned dealership serving Austin",
        "phone": "(555) 345-6789",
        "email": "sales@familyauto.com",
        "address": "789 Family Blvd, Austin, TX 78701",
        "rating": 4.8,
        "review_count": 203,
        "verified": True,
    },
    {
        "name": "Green Drive Motors",
        "location": "Seattle, WA",
        "description": "Eco-friendly and electric vehicles",
        "phone": "(555) 456-7890",
        "email": "hello@greendrive.com",
        "address": "321 Green St, Seattle, WA 98101",
        "rating": 4.6,
        "review_count": 124,
        "verified": True,
    },
]

# (dealer index, car fields)
SAMPLE_CARS = [
    (0, {"make": "BMW", "model": "3 Series", "year": 2023, "price": 45900, "mileage": 25000,
         "fuel_type": "gasoline", "transmission": "automatic", "body_type": "sedan", "drivetrain": "rwd",
         "engine": "2.0L Turbo", "horsepower": 255, "color": "Red", "condition": "certified",
         "features": ["Navigation", "Leather Seats", "Sunroof", "Backup Camera"]}),
    (2, {"make": "Toyota", "model": "RAV4", "year": 2022, "price": 32500, "mileage": 18500,
         "fuel_type": "hybrid", "transmission": "automatic", "body_type": "suv", "drivetrain": "awd",
         "engine": "2.5L Hybrid", "horsepower": 219, "color": "White", "condition": "used",
         "features": ["All-Wheel Drive", "Hybrid Engine", "Safety Sense 2.0"]}),
    (3, {"make": "Tesla", "model": "Model 3", "year": 2023, "price": 48900, "mileage": 12000,
         "fuel_type": "electric", "transmission": "automatic", "body_type": "sedan", "drivetrain": "rwd",
         "engine": "Electric Motor", "horsepower": 283, "color": "Silver", "condition": "used",
         "features": ["Autopilot", "Supercharging", "Premium Interior"]}),
    (2, {"make": "Honda", "model": "Civic", "year": 2023, "price": 24900, "mileage": 8200,
         "fuel_type": "gasoline", "transmission": "manual", "body_type": "sedan", "drivetrain": "fwd",
         "engine": "2.0L VTEC", "horsepower": 158, "color": "Blue", "condition": "new",
         "features": ["Honda Sensing", "Manual Transmission", "Sport Mode"]}),
    (0, {"make": "Ford", "model": "F-150", "year": 2022, "price": 42700, "mileage": 35000,
         "fuel_type": "gasoline", "transmission": "automatic", "body_type": "pickup", "drivetrain": "4wd",
         "engine": "3.5L V6", "horsepower": 400, "color": "Black", "condition": "used",
         "features": ["4WD", "Towing Package", "Bed Liner"]}),
    (1, {"make": "Audi", "model": "A5 Convertible", "year": 2023, "price": 54200, "mileage": 15600,
         "fuel_type": "gasoline", "transmission": "automatic", "body_type": "convertible", "drivetrain": "awd",
         "engine": "2.0L TFSI", "horsepower": 261, "color": "White", "condition": "certified",
         "features": ["Quattro AWD", "Virtual Cockpit", "Bang & Olufsen Audio"]}),
]


def matches_filters(car: Car, filters: Dict[str, Any]) -> bool:
    if not car.available:
        return False
    if filters.get("make") and filters["make"].lower() not in car.make.lower():
        return False
    if filters.get("model") and filters["model"].lower() not in car.model.lower():
        return False
    if filters.get("min_price") is not None and car.price < filters["min_price"]:
        return False
    if filters.get("max_price") is not None and car.price > filters["max_price"]:
        return False
    if filters.get("min_year") is not None and car.year < filters["min_year"]:
        return False
    if filters.get("max_year") is not None and car.year > filters["max_year"]:
        return False
    for key in ("fuel_type", "transmission", "body_type"):
        if filters.get(key) and getattr(car, key) != filters[key]:
            return False
    if filters.get("max_mileage") is not None and car.mileage > filters["max_mileage"]:
        return False
    return True


def matches_text(car: Car, tokens: List[str]) -> bool:
    if not car.available or not tokens:
        return False
    haystack = [str(getattr(car, field)).lower() for field in TEXT_SEARCH_FIELDS]
    return all(
        token == str(car.year) or any(token in value for value in haystack)
        for token in tokens
    )


class MemStorage(Storage):
    """Dict-backed store for development and tests. Returns copies, never live records."""

    def __init__(self, seed: bool = False):
        self._tables: Dict[str, Dict[str, Document]] = {
            name: {}
            for name in (
                "users", "dealers", "cars", "reviews", "favorites", "inventory_logs",
                "sales", "dealer_analytics", "courses", "tests", "enrollments",
            )
        }
        if seed:
            self.seed_data()

    def seed_data(self):
        dealer_ids = [self.create_dealer(Dealer(**data)).id for data in SAMPLE_DEALERS]
        for index, data in SAMPLE_CARS:
            self.create_car(Car(dealer_id=dealer_ids[index], **data))
        logger.info("🌱 Seeded in-memory storage with %d dealers and %d cars", len(SAMPLE_DEALERS), len(SAMPLE_CARS))

    # Table helpers
    def _insert(self, table: str, record: T) -> T:
        record = record.model_copy(deep=True)
        if not record.id:
            record.id = new_id()
        self._tables[table][record.id] = record
        return record.model_copy(deep=True)

    def _get(self, table: str, record_id: str):
        record = self._tables[table].get(record_id)
        return record.model_copy(deep=True) if record else None

    def _all(self, table: str) -> list:
        return [record.model_copy(deep=True) for record in self._tables[table].values()]

    def _update(self, table: str, record_id: str, updates: Dict[str, Any]):
        record = self._tables[table].get(record_id)
        if record is None:
            return None
        model_cls: Type[Document] = type(record)
        updated = model_cls.model_validate({**record.model_dump(), **updates})
        self._tables[table][record_id] = updated
        return updated.model_copy(deep=True)

    # User operations
    def get_user(self, user_id):
        return self._get("users", user_id)

    def get_user_by_username(self, username):
        return next((u for u in self._all("users") if u.username == username), None)

    def get_user_by_email(self, email):
        return next((u for u in self._all("users") if u.email == email), None)

    def create_user(self, user):
        return self._insert("users", user)

    def update_user(self, user_id, updates):
        return self._update("users", user_id, updates)

    def delete_user(self, user_id):
        return self._tables["users"].pop(user_id, None) is not None

    def list_users(self, role=None, is_approved=None, is_active=None):
        return [
            u for u in self._all("users")
            if (role is None or u.role == role)
            and (is_approved is None or u.is_approved == is_approved)
            and (is_active is None or u.is_active == is_active)
        ]

    # Dealer operations
    def get_dealer(self, dealer_id):
        return self._get("dealers", dealer_id)

    def get_all_dealers(self):
        return self._all("dealers")

    def get_dealers_by_location(self, location):
        needle = location.lower()
        return [d for d in self._all("dealers") if needle in d.location.lower()]

    def create_dealer(self, dealer):
        return self._insert("dealers", dealer)

    def update_dealer_rating(self, dealer_id, rating, review_count):
        self._update("dealers", dealer_id, {"rating": rating, "review_count": review_count})

    # Car operations
    def get_car(self, car_id):
        return self._get("cars", car_id)

    def get_all_cars(self):
        return [c for c in self._all("cars") if c.available]

    def get_cars_by_dealer(self, dealer_id, include_unavailable=False):
        return [
            c for c in self._all("cars")
            if c.dealer_id == dealer_id and (include_unavailable or c.available)
        ]

    def search_cars(self, filters):
        return [c for c in self._all("cars") if matches_filters(c, filters)]

    def search_cars_by_text(self, query):
        tokens = tokenize(query)
        return [c for c in self._all("cars") if matches_text(c, tokens)]

    def get_featured_cars(self, limit=FEATURED_LIMIT):
        cars = sorted(self.get_all_cars(), key=lambda c: c.created_at, reverse=True)
        return cars[:limit]

    def create_car(self, car):
        return self._insert("cars", car)

    def update_car(self, car_id, updates):
        return self._update("cars", car_id, {**updates, "updated_at": utcnow()})

    # Review operations
    def get_review(self, review_id):
        return self._get("reviews", review_id)

    def get_reviews_by_dealer(self, dealer_id):
        return [r for r in self._all("reviews") if r.dealer_id == dealer_id]

    def get_reviews_by_car(self, car_id):
        return [r for r in self._all("reviews") if r.car_id == car_id]

    def get_reviews_by_user(self, user_id):
        return [r for r in self._all("reviews") if r.user_id == user_id]

    def create_review(self, review):
        return self._insert("reviews", review)

    # Favorite operations
    def get_user_favorites(self, user_id):
        return [f for f in self._all("favorites") if f.user_id == user_id]

    def get_favorite(self, user_id, car_id):
        return next(
            (f for f in self._all("favorites") if f.user_id == user_id and f.car_id == car_id),
            None,
        )

    def add_to_favorites(self, favorite):
        return self._insert("favorites", favorite)

    def remove_from_favorites(self, user_id, car_id):
        favorite = self.get_favorite(user_id, car_id)
        if favorite is None:
            return False
        del self._tables["favorites"][favorite.id]
        return True

    # Inventory management
    def create_inventory_log(self, log):
        return self._insert("inventory_logs", log)

    def get_inventory_logs(self, dealer_id):
        logs = [log for log in self._all("inventory_logs") if log.dealer_id == dealer_id]
        return sorted(logs, key=lambda log: log.created_at, reverse=True)

    def create_sale(self, sale):
        return self._insert("sales", sale)

    def get_sale(self, sale_id):
        return self._get("sales", sale_id)

    def get_sales_by_dealer(self, dealer_id):
        return [s for s in self._all("sales") if s.dealer_id == dealer_id]

    def update_sale(self, sale_id, updates):
        return self._update("sales", sale_id, updates)

    def create_dealer_analytics(self, analytics):
        return self._insert("dealer_analytics", analytics)

    def get_dealer_analytics(self, dealer_id, period=None):
        items = [
            a for a in self._all("dealer_analytics")
            if a.dealer_id == dealer_id and (period is None or a.period == period)
        ]
        return sorted(items, key=lambda a: a.date, reverse=True)

    # Course operations
    def get_course(self, course_id):
        return self._get("courses", course_id)

    def list_courses(self, category=None, course_ids=None, active_only=True):
        wanted = set(course_ids) if course_ids is not None else None
        return [
            c for c in self._all("courses")
            if (not active_only or c.is_active)
            and (category is None or c.category == category)
            and (wanted is None or c.id in wanted)
        ]

    def count_courses(self, active_only=True):
        return len(self.list_courses(active_only=active_only))

    def create_course(self, course):
        return self._insert("courses", course)

    def update_course(self, course_id, updates):
        return self._update("courses", course_id, updates)

    def add_module(self, course_id, module):
        course = self._tables["courses"].get(course_id)
        if course is None:
            return None
        course.modules.append(module.model_copy(deep=True))
        return course.model_copy(deep=True)

    def add_note(self, course_id, note):
        course = self._tables["courses"].get(course_id)
        if course is None:
            return None
        course.notes.append(note.model_copy(deep=True))
        return course.model_copy(deep=True)

    # Test operations
    def get_test(self, test_id):
        return self._get("tests", test_id)

    def list_tests(self, course_id=None, active_only=True):
        return [
            t for t in self._all("tests")
            if (not active_only or t.is_active) and (course_id is None or t.course_id == course_id)
        ]

    def create_test(self, test):
        return self._insert("tests", test)

    def save_test_result(self, test_id, result):
        test = self._tables["tests"].get(test_id)
        if test is None:
            return None
        result = result.model_copy(deep=True)
        for index, existing in enumerate(test.results):
            if existing.student_id == result.student_id:
                test.results[index] = result
                break
        else:
            test.results.append(result)
        return test.model_copy(deep=True)

    # Enrollment operations
    def get_enrollment(self, student_id, course_id):
        return next(
            (
                e for e in self._all("enrollments")
                if e.student_id == student_id and e.course_id == course_id
            ),
            None,
        )

    def list_enrollments(self, student_id):
        return [e for e in self._all("enrollments") if e.student_id == student_id]

    def create_enrollment(self, enrollment):
        return self._insert("enrollments", enrollment)

    def update_enrollment(self, student_id, course_id, updates):
        enrollment = self.get_enrollment(student_id, course_id)
        if enrollment is None:
            return None
        return self._update("enrollments", enrollment.id, updates)
