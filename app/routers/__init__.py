from .auth import router as auth_router
from .coupon import router as coupon_router
from .purchase import router as purchase_router
from .sales import router as sales_router
from .student import router as student_router

routes = [
    auth_router,
    purchase_router,
    student_router,
    coupon_router,
    sales_router,
]
