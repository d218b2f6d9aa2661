from marketplace_feed.main import create_app

app = create_app()
