import os

from dotenv import load_dotenv

from gemini import GeminiGateway

load_dotenv()

gateway = GeminiGateway(api_key=os.environ["GEMINI_API_KEY"])

print("--- AVAILABLE MODELS ---")
for name, actions in gateway.list_models():
    print(f"Name: {name}")
    print(f"Supported actions: {', '.join(actions)}")
    print("-------------------")
