from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from app.models.assessment.assessment import CourseTest, GradeResult
from app.models.car.car import Car
from app.models.course.course import Course, Module, Note
from app.models.dealer.dealer import Dealer
from app.models.enrollment.enrollment import Enrollment
from app.models.favorite.favorite import FavoriteCar
from app.models.inventory.inventory import DealerAnalytics, InventoryLog, Sale
from app.models.review.review import Review
from app.models.user.user import User

FEATURED_LIMIT = 6

# Car fields matched by free-text search
TEXT_SEARCH_FIELDS = ("make", "model", "body_type", "fuel_type", "transmission")


def tokenize(query: str) -> List[str]:
    return query.lower().split()


class Storage(ABC):
    """Persistence contract shared by the in-memory and MongoDB stores.

    Lookups return ``None`` for unknown or malformed ids. ``updates`` mappings
    use the snake_case field names of the entity models.
    """

    # User operations
    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]: ...

    @abstractmethod
    def create_user(self, user: User) -> User: ...

    @abstractmethod
    def update_user(self, user_id: str, updates: Dict[str, Any]) -> Optional[User]: ...

    @abstractmethod
    def delete_user(self, user_id: str) -> bool: ...

    @abstractmethod
    def list_users(
        self,
        role: Optional[str] = None,
        is_approved: Optional[bool] = None,
        is_active: Optional[bool] = None,
    ) -> List[User]: ...

    # Dealer operations
    @abstractmethod
    def get_dealer(self, dealer_id: str) -> Optional[Dealer]: ...

    @abstractmethod
    def get_all_dealers(self) -> List[Dealer]: ...

    @abstractmethod
    def get_dealers_by_location(self, location: str) -> List[Dealer]: ...

    @abstractmethod
    def create_dealer(self, dealer: Dealer) -> Dealer: ...

    @abstractmethod
    def update_dealer_rating(self, dealer_id: str, rating: float, review_count: int) -> None: ...

    # Car operations
    @abstractmethod
    def get_car(self, car_id: str) -> Optional[Car]: ...

    @abstractmethod
    def get_all_cars(self) -> List[Car]:
        """Available cars only."""

    @abstractmethod
    def get_cars_by_dealer(self, dealer_id: str, include_unavailable: bool = False) -> List[Car]: ...

    @abstractmethod
    def search_cars(self, filters: Dict[str, Any]) -> List[Car]:
        """Available cars matching every supplied filter (see CarSearchFilters)."""

    @abstractmethod
    def search_cars_by_text(self, query: str) -> List[Car]:
        """Available cars where every token of ``query`` matches a text field or the year."""

    @abstractmethod
    def get_featured_cars(self, limit: int = FEATURED_LIMIT) -> List[Car]: ...

    @abstractmethod
    def create_car(self, car: Car) -> Car: ...

    @abstractmethod
    def update_car(self, car_id: str, updates: Dict[str, Any]) -> Optional[Car]: ...

    # Review operations
    @abstractmethod
    def get_review(self, review_id: str) -> Optional[Review]: ...

    @abstractmethod
    def get_reviews_by_dealer(self, dealer_id: str) -> List[Review]: ...

    @abstractmethod
    def get_reviews_by_car(self, car_id: str) -> List[Review]: ...

    @abstractmethod
    def get_reviews_by_user(self, user_id: str) -> List[Review]: ...

    @abstractmethod
    def create_review(self, review: Review) -> Review: ...

    # Favorite operations
    @abstractmethod
    def get_user_favorites(self, user_id: str) -> List[FavoriteCar]: ...

    @abstractmethod
    def get_favorite(self, user_id: str, car_id: str) -> Optional[FavoriteCar]: ...

    @abstractmethod
    def add_to_favorites(self, favorite: FavoriteCar) -> FavoriteCar: ...

    @abstractmethod
    def remove_from_favorites(self, user_id: str, car_id: str) -> bool: ...

    # Inventory management
    @abstractmethod
    def create_inventory_log(self, log: InventoryLog) -> InventoryLog: ...

    @abstractmethod
    def get_inventory_logs(self, dealer_id: str) -> List[InventoryLog]:
        """Newest first."""

    @abstractmethod
    def create_sale(self, sale: Sale) -> Sale: ...

    @abstractmethod
    def get_sale(self, sale_id: str) -> Optional[Sale]: ...

    @abstractmethod
    def get_sales_by_dealer(self, dealer_id: str) -> List[Sale]: ...

    @abstractmethod
    def update_sale(self, sale_id: str, updates: Dict[str, Any]) -> Optional[Sale]: ...

    @abstractmethod
    def create_dealer_analytics(self, analytics: DealerAnalytics) -> DealerAnalytics: ...

    @abstractmethod
    def get_dealer_analytics(self, dealer_id: str, period: Optional[str] = None) -> List[DealerAnalytics]:
        """Newest ``date`` first."""

    # Course operations
    @abstractmethod
    def get_course(self, course_id: str) -> Optional[Course]: ...

    @abstractmethod
    def list_courses(
        self,
        category: Optional[str] = None,
        course_ids: Optional[Iterable[str]] = None,
        active_only: bool = True,
    ) -> List[Course]: ...

    @abstractmethod
    def count_courses(self, active_only: bool = True) -> int: ...

    @abstractmethod
    def create_course(self, course: Course) -> Course: ...

    @abstractmethod
    def update_course(self, course_id: str, updates: Dict[str, Any]) -> Optional[Course]: ...

    @abstractmethod
    def add_module(self, course_id: str, module: Module) -> Optional[Course]: ...

    @abstractmethod
    def add_note(self, course_id: str, note: Note) -> Optional[Course]: ...

    # Test operations
    @abstractmethod
    def get_test(self, test_id: str) -> Optional[CourseTest]: ...

    @abstractmethod
    def list_tests(self, course_id: Optional[str] = None, active_only: bool = True) -> List[CourseTest]: ...

    @abstractmethod
    def create_test(self, test: CourseTest) -> CourseTest: ...

    @abstractmethod
    def save_test_result(self, test_id: str, result: GradeResult) -> Optional[CourseTest]:
        """Insert ``result``, replacing any earlier result of the same student."""

    # Enrollment operations
    @abstractmethod
    def get_enrollment(self, student_id: str, course_id: str) -> Optional[Enrollment]: ...

    @abstractmethod
    def list_enrollments(self, student_id: str) -> List[Enrollment]: ...

    @abstractmethod
    def create_enrollment(self, enrollment: Enrollment) -> Enrollment: ...

    @abstractmethod
    def update_enrollment(
        self, student_id: str, course_id: str, updates: Dict[str, Any]
    ) -> Optional[Enrollment]: ...
