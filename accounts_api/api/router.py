from fastapi import APIRouter

API_VERSION = 1

router = APIRouter()


@router.get("/version")
def version():
    return {"v": API_VERSION}
