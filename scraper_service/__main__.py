from scraper_service.main import run

run()
