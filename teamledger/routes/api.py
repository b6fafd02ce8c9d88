from fastapi import APIRouter

from teamledger.routes import bank, expenses, fees, members, products, reimbursements, reports, sales, settings

api_router = APIRouter()

api_router.include_router(members.router)
api_router.include_router(products.router)
api_router.include_router(sales.router)
api_router.include_router(fees.router)
api_router.include_router(reimbursements.router)
api_router.include_router(expenses.router)
api_router.include_router(bank.router)
api_router.include_router(reports.router)
api_router.include_router(settings.router)
