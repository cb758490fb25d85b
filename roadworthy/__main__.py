import os

from roadworthy import create_app

# For direct execution
if __name__ == '__main__':
    app = create_app()
    app.run(debug=os.environ.get('FLASK_DEBUG') == '1', host='0.0.0.0',
            port=int(os.environ.get('PORT', 5000)))
