import math
from datetime import datetime
from typing import Optional

AVERAGE_MILES_PER_YEAR = 12000
MILEAGE_PENALTY_PER_1000 = 50
RECOMMENDED_DOWN_PAYMENT = 0.20

CONDITION_MULTIPLIERS = {
    "excellent": 1.1,
    "good": 1.0,
    "fair": 0.9,
    "poor": 0.8,
}

MARKET_POSITION_MULTIPLIERS = {
    "premium": 1.15,
    "competitive": 1.0,
    "value": 0.9,
}

# (minimum credit score, APR percent), highest first
CREDIT_TIERS = [
    (750, 4.5),
    (700, 6.5),
    (650, 8.5),
    (600, 12.0),
]
FALLBACK_RATE = 15.0


class CalculatorError(ValueError):
    pass


def estimate_rate(credit_score: int) -> float:
    for minimum, rate in CREDIT_TIERS:
        if credit_score >= minimum:
            return rate
    return FALLBACK_RATE


def monthly_payment(principal: float, annual_rate: float, months: int) -> float:
    r = annual_rate / 100 / 12
    if r == 0:
        return principal / months
    try:
        growth = (1 + r) ** months
    except OverflowError:
        raise CalculatorError("Loan term and interest rate are out of range")
    payment = principal * r * growth / (growth - 1)
    if not math.isfinite(payment):
        raise CalculatorError("Loan term and interest rate are out of range")
    return payment


def calculate_finance(
    car_price: float,
    down_payment: float = 0,
    loan_term_months: int = 60,
    interest_rate: Optional[float] = None,
    credit_score: Optional[int] = None,
) -> dict:
    principal = car_price - down_payment
    if principal <= 0:
        raise CalculatorError("Down payment must be less than the car price")
    if loan_term_months <= 0:
        raise CalculatorError("Loan term must be at least one month")

    if interest_rate is None:
        interest_rate = estimate_rate(credit_score) if credit_score is not None else FALLBACK_RATE

    payment = monthly_payment(principal, interest_rate, loan_term_months)
    total_paid = payment * loan_term_months
    if not math.isfinite(total_paid):
        raise CalculatorError("Car price is out of range")
    return {
        "monthlyPayment": round(payment, 2),
        "totalInterest": round(total_paid - principal, 2),
        "totalPaid": round(total_paid, 2),
        "principal": round(principal, 2),
        "interestRate": interest_rate,
        "loanTermMonths": loan_term_months,
        "recommendedDownPayment": round(car_price * RECOMMENDED_DOWN_PAYMENT, 2),
    }


def round_half_up(value: float) -> int:
    """Halves round up: 2.5 -> 3, -2.5 -> -2."""
    return math.floor(value + 0.5)


def suggest_price(
    price: float,
    year: int,
    mileage: int,
    condition: str = "good",
    market_position: str = "competitive",
    reference_year: Optional[int] = None,
) -> dict:
    """Suggested listing price and range from the base price, age, mileage and condition."""
    if reference_year is None:
        reference_year = datetime.now().year
    if condition not in CONDITION_MULTIPLIERS:
        raise CalculatorError(f"Unknown condition: {condition}")
    if market_position not in MARKET_POSITION_MULTIPLIERS:
        raise CalculatorError(f"Unknown market position: {market_position}")

    average_mileage = (reference_year - year) * AVERAGE_MILES_PER_YEAR
    # below-average mileage earns a credit at the same rate
    mileage_adjustment = -(mileage - average_mileage) / 1000 * MILEAGE_PENALTY_PER_1000
    condition_multiplier = CONDITION_MULTIPLIERS[condition]
    position_multiplier = MARKET_POSITION_MULTIPLIERS[market_position]

    suggested = (price * condition_multiplier + mileage_adjustment) * position_multiplier
    return {
        "suggestedPrice": round_half_up(suggested),
        "priceRange": {
            "low": round_half_up(suggested * 0.95),
            "high": round_half_up(suggested * 1.1),
        },
        "averageMileage": average_mileage,
        "adjustments": {
            "mileage": round_half_up(mileage_adjustment),
            "condition": round_half_up(price * (condition_multiplier - 1)),
            "position": round_half_up(price * (position_multiplier - 1)),
        },
    }
