# Supabase tables: profiles, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id, one row per identity)
- email: text (not null) - synced from auth.users
- name: text (nullable)
- phone: text (nullable)
- role: text ('admin' | 'viewer', default 'viewer')
- status: text ('active' | 'suspended', default 'active')
- last_login: timestamp (nullable)
- profile_image_url: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

role and status are only written by admin procedures; the self-service
update accepts name, phone and profile_image_url.
Deleting a profile does not cascade to media_items or audit_logs.
"""
