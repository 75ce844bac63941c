# Database module
from outfit_service.db.wardrobe import WardrobeStore, MemoryWardrobeStore, MongoWardrobeStore
from outfit_service.db.outfits import OutfitStore, MemoryOutfitStore, MongoOutfitStore
from outfit_service.db.reference import ReferenceStore, MongoReferenceStore
from outfit_service.db.credentials import CredentialStore, MongoCredentialStore
