"""Fixed user-facing texts."""

WELCOME_MESSAGE = """
🤖 Welcome to NodeMate!
Your AI-powered Node.js package management assistant.

NodeMate helps you:
• Find and install the best packages for your project
• Resolve dependency conflicts
• Get AI-powered recommendations
• Compare similar packages
• Generate usage examples

Type 'nodemate chat' to start an interactive session or use --help for more options.
"""

FIRST_TIME_SETUP = """
🎉 Welcome to NodeMate!

It looks like this is your first time using NodeMate.
Let's set up your AI provider to get started.
"""

CONFIG_SUCCESS = """
✅ Configuration saved successfully!
You can now use NodeMate with your selected AI provider.

Try: nodemate chat
"""

CHAT_WELCOME = """
🤖 NodeMate Chat Mode

I'm here to help with your Node.js package management needs.
Ask me anything about packages, dependencies, or get recommendations!

Available commands:
• /help - Show all commands
• /config - View configuration
• /exit - Exit chat mode

What can I help you with today?
"""

THINKING_MESSAGE = "Dr. Node is thinking..."

GOODBYE_MESSAGE = "Thanks for using Dr. Node! 👋"
