import uvicorn
import os

if __name__ == "__main__":
    # Run from the project root so uvicorn can import 'alt_text_bot.main:app'
    # and pydantic-settings finds the .env file next to this script.
    current_dir = os.path.dirname(os.path.abspath(__file__))
    os.chdir(current_dir)

    uvicorn.run(
        "alt_text_bot.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "false").lower() == "true",
    )
