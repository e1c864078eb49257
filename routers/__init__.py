from fastapi import APIRouter
from .auth import auth_router
from . import (
    admin, arts, cart, categories, design_elements, favorites,
    home_sections, materials, products, projects, thumbnails, users,
)
router = APIRouter()
router.include_router(auth_router)
router.include_router(users.router)
router.include_router(products.router)
router.include_router(categories.router)
router.include_router(materials.router)
router.include_router(arts.router)
router.include_router(cart.router)
router.include_router(favorites.router)
router.include_router(projects.router)
router.include_router(design_elements.router)
router.include_router(home_sections.router)
router.include_router(thumbnails.router)
router.include_router(admin.router)
