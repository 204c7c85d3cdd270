from app.routes.user.router import auth_router as auth
from app.routes.car.router import car_router as car
from app.routes.dealer.router import dealer_router as dealer
from app.routes.review.router import review_router as review
from app.routes.favorite.router import favorite_router as favorite
from app.routes.inventory.router import inventory_router as inventory
from app.routes.calculator.router import calculator_router as calculator
from app.routes.learning.auth_router import learning_auth_router as learning_auth
from app.routes.learning.course_router import course_router as course
from app.routes.learning.assessment_router import assessment_router as assessment
from app.routes.learning.admin_router import admin_router as learning_admin


def get_all_routers():
    return [
        auth,
        car,
        dealer,
        review,
        favorite,
        inventory,
        calculator,
        learning_auth,
        course,
        assessment,
        learning_admin,
    ]
