from sqlalchemy.orm import declarative_base

# Vendor database tables (orders, pricing, payments, shipping labels)
Base = declarative_base()

# Client-side file cache; kept on its own metadata so the vendor
# database never grows a cached_files table.
CacheBase = declarative_base()
