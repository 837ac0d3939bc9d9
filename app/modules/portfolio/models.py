# Supabase table: portfolio
# Images normally live in the portfolio-images bucket, but image_url may point anywhere

"""
Expected Supabase table structure:

portfolio:
- id: uuid (primary key, default gen_random_uuid())
- title: text (not null)
- image_url: text (not null)
- description: text (nullable)
- order_index: integer (default 0) - display rank, ascending
- visible: boolean (default true) - hidden rows are served to admins only
- created_at: timestamp (default: now())

RLS: "Anyone can read visible portfolio" (visible = true); writes via service role.
"""
