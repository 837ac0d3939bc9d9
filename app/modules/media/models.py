# Supabase table: media_items
# Blobs live in Supabase Storage buckets (media-images, media-videos)

"""
Expected Supabase table structure:

media_items:
- id: uuid (primary key, default gen_random_uuid())
- title: text (not null)
- description: text (nullable)
- file_name: text (not null)
- file_path: text (not null) - storage key, unique per storage_bucket
- file_size: bigint (nullable)
- mime_type: text (nullable)
- media_type: text ('image' | 'video')
- storage_bucket: text (not null)
- uploaded_by: uuid (references profiles.id)
- usage_locations: jsonb (default '[]')
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Unique constraint: (storage_bucket, file_path)
Storage keys follow {uploaded_by}/{epoch_ms}.{ext}
"""
