from datetime import datetime, timedelta, timezone

from app.database.memory_storage import SAMPLE_CARS, SAMPLE_DEALERS, MemStorage
from app.models.assessment.assessment import CourseTest, GradeResult
from app.models.car.car import Car
from app.models.course.course import Course, Module, Note
from app.models.dealer.dealer import Dealer
from app.models.enrollment.enrollment import Enrollment
from app.models.favorite.favorite import FavoriteCar
from app.models.inventory.inventory import DealerAnalytics, InventoryLog
from app.models.user.user import User


def add_car(store, dealer_id, **fields):
    data = {
        "make": "Toyota", "model": "RAV4", "year": 2022, "price": 32500, "mileage": 18500,
        "fuel_type": "hybrid", "transmission": "automatic", "body_type": "suv", "drivetrain": "awd",
        "dealer_id": dealer_id,
    }
    data.update(fields)
    return store.create_car(Car(**data))


def test_users_round_trip(storage):
    user = storage.create_user(User(username="ana", email="ana@example.com", password="x", role="student"))

    assert user.id
    assert storage.get_user(user.id).username == "ana"
    assert storage.get_user_by_username("ana").id == user.id
    assert storage.get_user_by_email("ana@example.com").id == user.id

    updated = storage.update_user(user.id, {"is_approved": False, "enrolled_courses": ["c1"]})
    assert updated.is_approved is False
    assert updated.enrolled_courses == ["c1"]
    assert [u.id for u in storage.list_users(role="student", is_approved=False)] == [user.id]
    assert storage.list_users(role="admin") == []

    assert storage.delete_user(user.id) is True
    assert storage.get_user(user.id) is None
    assert storage.delete_user(user.id) is False


def test_unknown_and_malformed_ids_return_none(storage):
    assert storage.get_car("not-an-id") is None
    assert storage.get_car("64b7f0c2a1b2c3d4e5f60718") is None
    assert storage.update_car("not-an-id", {"price": 1}) is None
    assert storage.get_course(None) is None


def test_dealer_location_is_case_insensitive_substring(storage):
    storage.create_dealer(Dealer(name="Elite Motors", location="Beverly Hills, CA"))
    storage.create_dealer(Dealer(name="Green Drive", location="Seattle, WA"))

    assert [d.name for d in storage.get_dealers_by_location("beverly")] == ["Elite Motors"]
    assert len(storage.get_all_dealers()) == 2


def test_dealer_rating_update(storage):
    dealer = storage.create_dealer(Dealer(name="Elite Motors", location="CA"))
    storage.update_dealer_rating(dealer.id, 4.33, 3)

    stored = storage.get_dealer(dealer.id)
    assert stored.rating == 4.33
    assert stored.review_count == 3


def test_search_cars_filters(storage):
    add_car(storage, "d1", make="Toyota", model="RAV4", price=32500, year=2022)
    add_car(storage, "d1", make="Honda", model="Civic", price=24900, year=2023,
            fuel_type="gasoline", body_type="sedan", mileage=8200)
    add_car(storage, "d1", make="Toyota", model="Camry", price=28000, available=False)

    assert [c.model for c in storage.search_cars({"make": "toy"})] == ["RAV4"]
    assert [c.model for c in storage.search_cars({"max_price": 30000})] == ["Civic"]
    assert [c.model for c in storage.search_cars({"min_year": 2023, "fuel_type": "gasoline"})] == ["Civic"]
    assert [c.model for c in storage.search_cars({"max_mileage": 10000})] == ["Civic"]
    assert len(storage.search_cars({})) == 2


def test_text_search_requires_every_token(storage):
    add_car(storage, "d1", make="Toyota", model="RAV4", year=2022)
    add_car(storage, "d1", make="Tesla", model="Model 3", year=2023, fuel_type="electric", body_type="sedan")

    assert [c.make for c in storage.search_cars_by_text("toyota suv")] == ["Toyota"]
    assert [c.make for c in storage.search_cars_by_text("2023")] == ["Tesla"]
    assert storage.search_cars_by_text("tesla pickup") == []
    assert storage.search_cars_by_text("   ") == []


def test_text_search_treats_input_literally(storage):
    add_car(storage, "d1", make="Ford", model="F-150", body_type="pickup")

    assert [c.model for c in storage.search_cars_by_text("f-150")] == ["F-150"]
    assert storage.search_cars_by_text("f.150") == []
    assert storage.search_cars_by_text("(ford") == []
    assert storage.search_cars_by_text("ford ²") == []
    assert storage.search_cars_by_text("ford ٢٠٢٣") == []


def test_featured_cars_are_newest_available(storage):
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for day in range(8):
        add_car(storage, "d1", model=f"Model {day}", created_at=start + timedelta(days=day))
    add_car(storage, "d1", model="Hidden", available=False, created_at=start + timedelta(days=30))

    featured = storage.get_featured_cars()
    assert [c.model for c in featured] == [f"Model {day}" for day in range(7, 1, -1)]


def test_cars_by_dealer_hides_unavailable_unless_asked(storage):
    add_car(storage, "d1")
    add_car(storage, "d1", available=False)
    add_car(storage, "d2")

    assert len(storage.get_cars_by_dealer("d1")) == 1
    assert len(storage.get_cars_by_dealer("d1", include_unavailable=True)) == 2


def test_update_car_sets_updated_at(storage):
    car = add_car(storage, "d1")
    assert car.updated_at is None

    updated = storage.update_car(car.id, {"price": 31000})
    assert updated.price == 31000
    assert updated.updated_at is not None


def test_favorites(storage):
    favorite = storage.add_to_favorites(FavoriteCar(user_id="u1", car_id="c1"))

    assert storage.get_favorite("u1", "c1").id == favorite.id
    assert [f.car_id for f in storage.get_user_favorites("u1")] == ["c1"]
    assert storage.remove_from_favorites("u1", "c1") is True
    assert storage.remove_from_favorites("u1", "c1") is False
    assert storage.get_user_favorites("u1") == []


def test_inventory_logs_newest_first(storage):
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    storage.create_inventory_log(InventoryLog(dealer_id="d1", car_id="c1", action="added", created_at=start))
    storage.create_inventory_log(
        InventoryLog(dealer_id="d1", car_id="c1", action="sold", created_at=start + timedelta(days=1))
    )
    storage.create_inventory_log(InventoryLog(dealer_id="d2", car_id="c2", action="added"))

    assert [log.action for log in storage.get_inventory_logs("d1")] == ["sold", "added"]


def test_dealer_analytics_by_period(storage):
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    storage.create_dealer_analytics(DealerAnalytics(dealer_id="d1", period="monthly", date=start, total_sales=3))
    storage.create_dealer_analytics(
        DealerAnalytics(dealer_id="d1", period="monthly", date=start + timedelta(days=31), total_sales=5)
    )
    storage.create_dealer_analytics(DealerAnalytics(dealer_id="d1", period="weekly", date=start))

    monthly = storage.get_dealer_analytics("d1", "monthly")
    assert [a.total_sales for a in monthly] == [5, 3]
    assert len(storage.get_dealer_analytics("d1")) == 3


def test_courses_filters_and_embedded_content(storage):
    python = storage.create_course(Course(title="Python", description="d", category="programming"))
    design = storage.create_course(Course(title="Design", description="d", category="art"))
    storage.create_course(Course(title="Old", description="d", category="art", is_active=False))

    assert {c.title for c in storage.list_courses()} == {"Python", "Design"}
    assert [c.title for c in storage.list_courses(category="art")] == ["Design"]
    assert [c.title for c in storage.list_courses(course_ids=[python.id, "bogus"])] == ["Python"]
    assert storage.list_courses(course_ids=[]) == []
    assert storage.count_courses() == 2
    assert storage.count_courses(active_only=False) == 3

    course = storage.add_module(design.id, Module(
        title="Intro", youtube_url="https://youtu.be/abc", duration=30, order_index=0,
    ))
    course = storage.add_note(course.id, Note(title="Slides", pdf_url="https://example.com/s.pdf"))
    assert course.video_count == 1
    assert course.duration == 30
    assert course.notes[0].file_size == "Unknown"
    assert storage.get_course(design.id).modules[0].title == "Intro"
    assert storage.add_module("64b7f0c2a1b2c3d4e5f60718", course.modules[0]) is None


def test_save_test_result_replaces_student_result(storage):
    test = storage.create_test(CourseTest(title="Quiz", course_id="c1"))

    storage.save_test_result(test.id, GradeResult(student_id="s1", score=70, grade="C"))
    storage.save_test_result(test.id, GradeResult(student_id="s2", score=90, grade="A"))
    saved = storage.save_test_result(test.id, GradeResult(student_id="s1", score=85, grade="B"))

    assert [(r.student_id, r.grade) for r in saved.results] == [("s1", "B"), ("s2", "A")]
    assert storage.get_test(test.id).result_for("s1").score == 85
    assert storage.save_test_result("64b7f0c2a1b2c3d4e5f60718", saved.results[0]) is None


def test_tests_listing_filters(storage):
    storage.create_test(CourseTest(title="A", course_id="c1"))
    storage.create_test(CourseTest(title="B", course_id="c2"))
    storage.create_test(CourseTest(title="C", course_id="c1", is_active=False))

    assert [t.title for t in storage.list_tests(course_id="c1")] == ["A"]
    assert len(storage.list_tests(active_only=False)) == 3


def test_enrollments(storage):
    storage.create_enrollment(Enrollment(student_id="s1", course_id="c1"))

    assert storage.get_enrollment("s1", "c1").progress == 0
    assert storage.get_enrollment("s1", "c2") is None

    updated = storage.update_enrollment("s1", "c1", {"progress": 100, "is_completed": True})
    assert updated.is_completed is True
    assert [e.course_id for e in storage.list_enrollments("s1")] == ["c1"]
    assert storage.update_enrollment("s1", "c2", {"progress": 5}) is None


def test_memory_storage_returns_copies():
    store = MemStorage()
    car = add_car(store, "d1")
    car.price = 1

    assert store.get_car(car.id).price == 32500


def test_memory_storage_seed():
    store = MemStorage(seed=True)

    assert len(store.get_all_dealers()) == len(SAMPLE_DEALERS)
    assert len(store.get_all_cars()) == len(SAMPLE_CARS)
    dealer_ids = {d.id for d in store.get_all_dealers()}
    assert all(car.dealer_id in dealer_ids for car in store.get_all_cars())
