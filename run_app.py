#!/usr/bin/env python3
"""
Launch script for the Helium 10 Brand Revenue dashboard
"""

import subprocess
import sys
from pathlib import Path


def build_command(port: int = 8501) -> list:
    """Streamlit command line for the dashboard"""
    app_file = Path(__file__).parent / "helium10_streamlit_app.py"
    return [
        sys.executable,
        "-m", "streamlit", "run",
        str(app_file),
        "--server.headless", "false",
        "--server.port", str(port),
        "--browser.gatherUsageStats", "false",
    ]


def main():
    """Launch the Streamlit application"""
    try:
        print("🚀 Launching Helium 10 Brand Revenue dashboard...")
        print("📱 The app will open in your browser automatically")
        print("🔗 If it doesn't open, go to: http://localhost:8501")
        print("⏹️  Press Ctrl+C to stop the application")
        print("-" * 50)

        subprocess.run(build_command(), check=True)

    except KeyboardInterrupt:
        print("\n👋 Dashboard stopped")
    except Exception as e:
        print(f"❌ Error launching app: {e}")
        print("Make sure you have installed the project:")
        print("pip install -e .")


if __name__ == "__main__":
    main()
