from fastapi import APIRouter

from leave_engine.api.balances import employee_balance_router
from leave_engine.api.jobs import jobs_router
from leave_engine.api.reports import reports_router
from leave_engine.api.requests import requests_router

api_router = APIRouter()
api_router.include_router(requests_router)
api_router.include_router(employee_balance_router)
api_router.include_router(reports_router)
api_router.include_router(jobs_router)
