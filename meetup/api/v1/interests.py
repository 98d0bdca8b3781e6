from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from meetup.database import get_db
from meetup.repositories.interest_repository import InterestRepository
from meetup.schemas.social import InterestCategoryResponse

router = APIRouter()


@router.get("/", response_model=List[InterestCategoryResponse])
async def get_interest_categories(db: AsyncSession = Depends(get_db)):
    return await InterestRepository(db).get_all()
